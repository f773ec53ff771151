#!/usr/bin/env python3
# app.py
import os

import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks

from eda_workshop.settings import get_settings
from eda_workshop.wishlist_stack import WishlistStack

app = cdk.App()
settings = get_settings()

WishlistStack(app, settings.stack_name,
    settings=settings,
    env=cdk.Environment(
        account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=os.environ.get("CDK_DEFAULT_REGION"),
    ),
)

# cdk-nag flags the s3:* grant and the unauthenticated API, so it is opt-in
if settings.enable_nag:
    cdk.Aspects.of(app).add(AwsSolutionsChecks())

app.synth()
