# eda_workshop/wishlist_stack.py
from aws_cdk import (
    Aws,
    Stack,
    RemovalPolicy,
    CfnOutput,
    aws_apigateway as apigw,
    aws_events as events,
    aws_events_targets as targets,
    aws_iam as iam,
    aws_logs as logs,
    aws_s3 as s3,
    aws_stepfunctions as sfn,
    aws_stepfunctions_tasks as tasks,
)
from constructs import Construct

from eda_workshop.settings import StackSettings
from eda_workshop.wishlist import (
    DEAR_SANTA_PATH,
    GIFT_REQUESTED,
    GIFT_ROUTES,
    WISHLIST_PROPERTIES,
    WISHLIST_REQUIRED,
    gift_event_pattern,
    ingress_event_pattern,
    put_events_request_template,
)


class WishlistStack(Stack):
    '''
    CDK stack for the Dear Santa wishlist pipeline.
    POST /dear-santa is validated by API Gateway and published straight onto a custom
    event bus as a WishlistReceived event. Every wishlist is archived to CloudWatch Logs,
    and one rule per gift type starts an express state machine with a projection of the
    wishlist: lego gifts are re-published to the central elves bus, surprise gifts are
    written to the central bucket keyed by the requester.
    '''

    def __init__(self, scope: Construct, construct_id: str, settings: StackSettings = None, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.settings = settings or StackSettings()
        names = self.settings

        # === Event bus ===
        self.event_bus = events.EventBus(self, names.bus_name,
            event_bus_name=names.bus_name,
        )

        # === Archive every wishlist to CloudWatch Logs ===
        self.log_group = logs.LogGroup(self, names.name("BusLogGroup"),
            log_group_name=names.log_group_name,
            removal_policy=RemovalPolicy.DESTROY,
        )

        self.log_rule = events.Rule(self, names.name("BusLogGroupRule"),
            event_bus=self.event_bus,
            event_pattern=events.EventPattern(**ingress_event_pattern()),
            rule_name=names.name("BusLogGroupRule"),
            targets=[targets.CloudWatchLogGroup(self.log_group)],
        )

        # === Gift workflows ===
        self.state_machines = {
            "lego": self._lego_gift_state_machine(),
            "surprise": self._surprise_gift_state_machine(),
        }

        # One rule per gift type, each handing the workflow only the fields it needs
        self.gift_rules = {}
        for gift, fields in GIFT_ROUTES.items():
            rule_name = names.name(f"{gift.capitalize()}GiftRule")
            self.gift_rules[gift] = events.Rule(self, rule_name,
                event_bus=self.event_bus,
                event_pattern=events.EventPattern(**gift_event_pattern(gift)),
                rule_name=rule_name,
                targets=[
                    targets.SfnStateMachine(self.state_machines[gift],
                        input=events.RuleTargetInput.from_object({
                            field: events.EventField.from_path(f"$.detail.{field}") for field in fields
                        }),
                    )
                ],
            )

        # === Ingress: API Gateway -> PutEvents ===
        self.api = self._dear_santa_api()

        # === Outputs ===
        CfnOutput(self, "DearSantaEndpointUrl", value=self.api.url_for_path(f"/{DEAR_SANTA_PATH}"),
            description="The URL to post wishlists to.")
        CfnOutput(self, "EventBusName", value=self.event_bus.event_bus_name)
        CfnOutput(self, "LegoGiftStateMachineArn", value=self.state_machines["lego"].state_machine_arn)
        CfnOutput(self, "SurpriseGiftStateMachineArn", value=self.state_machines["surprise"].state_machine_arn)

    def _lego_gift_state_machine(self) -> sfn.StateMachine:
        """Re-publishes the lego request to the central elves bus as a GiftRequested event."""
        central_bus = events.EventBus.from_event_bus_arn(self, self.settings.name("CentralBus"),
            self.settings.central_event_bus_arn
        )

        put_lego_gift_event = tasks.EventBridgePutEvents(self, "PutLegoGiftEvent",
            entries=[
                tasks.EventBridgePutEventsEntry(
                    event_bus=central_bus,
                    detail=sfn.TaskInput.from_object({
                        "legoSet": sfn.JsonPath.string_at("$.legoSKU"),
                        "giftTo": sfn.JsonPath.string_at("$.from"),
                    }),
                    detail_type=GIFT_REQUESTED,
                    source=self.settings.elf_name,
                )
            ],
        )

        return sfn.StateMachine(self, self.settings.name("LegoGiftStateMachine"),
            definition_body=sfn.DefinitionBody.from_chainable(put_lego_gift_event),
            state_machine_name=self.settings.name("LegoGiftStateMachine"),
            state_machine_type=sfn.StateMachineType.EXPRESS,
            tracing_enabled=True,
        )

    def _surprise_gift_state_machine(self) -> sfn.StateMachine:
        """Writes the surprise request to the central bucket; the key is the requester's name."""
        central_bucket = s3.Bucket.from_bucket_arn(self, self.settings.name("CentralBucket"),
            self.settings.central_bucket_arn
        )

        put_surprise_gift_object = tasks.CallAwsService(self, "PutSurpriseGiftObject",
            service="s3",
            action="putObject",
            iam_action="s3:*",
            iam_resources=[central_bucket.arn_for_objects("*")],
            parameters={
                "Body": {"giftTo": sfn.JsonPath.string_at("$.from")},
                "Bucket": central_bucket.bucket_name,
                "Key": sfn.JsonPath.string_at("$.from"),
                "Tagging": f"source={self.settings.elf_name}",
            },
        )

        return sfn.StateMachine(self, self.settings.name("SurpriseGiftStateMachine"),
            definition_body=sfn.DefinitionBody.from_chainable(put_surprise_gift_object),
            state_machine_name=self.settings.name("SurpriseGiftStateMachine"),
            state_machine_type=sfn.StateMachineType.EXPRESS,
            tracing_enabled=True,
        )

    def _dear_santa_api(self) -> apigw.RestApi:
        names = self.settings

        # API Gateway calls EventBridge directly, so it needs its own role
        api_role = iam.Role(self, names.name("APIRole"),
            assumed_by=iam.ServicePrincipal("apigateway.amazonaws.com"),
            inline_policies={
                "putEvents": iam.PolicyDocument(statements=[
                    iam.PolicyStatement(
                        actions=["events:PutEvents"],
                        resources=[self.event_bus.event_bus_arn],
                    )
                ])
            },
        )

        api = apigw.RestApi(self, names.api_name,
            rest_api_name=names.api_name,
            deploy_options=apigw.StageOptions(tracing_enabled=True),
        )

        dear_santa = api.root.add_resource(DEAR_SANTA_PATH)

        request_validator = apigw.RequestValidator(self, names.name("RequestValidator"),
            rest_api=api,
            request_validator_name=names.name("RequestValidator"),
            validate_request_body=True,
        )

        request_model = apigw.Model(self, names.name("RequestModel"),
            rest_api=api,
            content_type="application/json",
            model_name=names.model_name,
            schema=apigw.JsonSchema(
                schema=apigw.JsonSchemaVersion.DRAFT7,
                title="Wishlist",
                type=apigw.JsonSchemaType.OBJECT,
                properties={
                    field: apigw.JsonSchema(type=apigw.JsonSchemaType.STRING, **definition)
                    for field, definition in WISHLIST_PROPERTIES.items()
                },
                required=list(WISHLIST_REQUIRED),
            ),
        )

        put_events_integration = apigw.Integration(
            type=apigw.IntegrationType.AWS,
            uri=f"arn:aws:apigateway:{Aws.REGION}:events:path//",
            integration_http_method="POST",
            options=apigw.IntegrationOptions(
                credentials_role=api_role,
                request_parameters={
                    "integration.request.header.X-Amz-Target": "'AWSEvents.PutEvents'",
                    "integration.request.header.Content-Type": "'application/x-amz-json-1.1'",
                },
                request_templates={
                    "application/json": put_events_request_template(self.event_bus.event_bus_name),
                },
                integration_responses=[
                    apigw.IntegrationResponse(
                        status_code="200",
                        response_templates={"application/json": ""},
                    )
                ],
            ),
        )

        dear_santa.add_method("POST", put_events_integration,
            method_responses=[apigw.MethodResponse(status_code="200")],
            request_models={"application/json": request_model},
            request_validator=request_validator,
        )

        return api
