# tests/conformance.py
"""
Helpers that read a synthesized template back into plain Python values so tests can
check what the managed services will do with a given event, without deploying.
"""
import json


def resolve(value) -> str:
    """Flattens CloudFormation intrinsics into a plain string."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "Fn::Join" in value:
        separator, parts = value["Fn::Join"]
        return separator.join(resolve(part) for part in parts)
    if isinstance(value, dict) and value.get("Ref") == "AWS::Partition":
        return "aws"
    return "<token>"


def json_path(document: dict, path: str):
    """Resolves a simple $.a.b path; missing fields resolve to None."""
    current = document
    for key in path.removeprefix("$").strip(".").split("."):
        if not key:
            continue
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def matches(pattern: dict, event: dict) -> bool:
    """Evaluates an exact-match event pattern against an event."""
    for key, expected in pattern.items():
        actual = event.get(key)
        if isinstance(expected, dict):
            if not isinstance(actual, dict) or not matches(expected, actual):
                return False
        elif actual not in expected:
            return False
    return True


def render_input_transformer(transformer: dict, event: dict) -> dict:
    """Builds the input a rule target receives for an event."""
    rendered = transformer["InputTemplate"]
    for key, path in transformer["InputPathsMap"].items():
        rendered = rendered.replace(f"<{key}>", json.dumps(json_path(event, path)))
    return json.loads(rendered)


def render_parameters(parameters, state_input: dict):
    """Applies Step Functions `.$` parameter paths to a state's input."""
    if isinstance(parameters, dict):
        rendered = {}
        for key, value in parameters.items():
            if key.endswith(".$"):
                rendered[key[:-2]] = json_path(state_input, value)
            else:
                rendered[key] = render_parameters(value, state_input)
        return rendered
    if isinstance(parameters, list):
        return [render_parameters(item, state_input) for item in parameters]
    return parameters


def wishlist_event(body: dict, detail_type: str = "WishlistReceived", source: str = "workshop.eda") -> dict:
    """The event the ingress integration publishes for a request body."""
    return {"detail-type": detail_type, "source": source, "detail": body}


def find_one(template, resource_type: str, properties: dict) -> tuple[str, dict]:
    found = template.find_resources(resource_type, {"Properties": properties})
    assert len(found) == 1, f"Expected one {resource_type} with {properties}, found {len(found)}"
    return next(iter(found.items()))


def state_machine_definition(template, name: str) -> tuple[str, dict]:
    logical_id, resource = find_one(template, "AWS::StepFunctions::StateMachine", {"StateMachineName": name})
    return logical_id, json.loads(resolve(resource["Properties"]["DefinitionString"]))


def routed_rules(template, event: dict) -> list[str]:
    """Names of the rules whose pattern matches the event."""
    rules = template.find_resources("AWS::Events::Rule")
    return sorted(
        rule["Properties"]["Name"]
        for rule in rules.values()
        if matches(rule["Properties"]["EventPattern"], event)
    )
