# tests/conftest.py
import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from eda_workshop.settings import StackSettings
from eda_workshop.wishlist_stack import WishlistStack


@pytest.fixture(scope="module")
def settings() -> StackSettings:
    """
    Fixed settings so resource names are stable across runs.
    """
    return StackSettings(participant_id="gblusthe", log_group_timestamp=1700000000000, _env_file=None)


@pytest.fixture(scope="module")
def stack(settings: StackSettings) -> WishlistStack:
    app = cdk.App()
    return WishlistStack(app, settings.stack_name, settings=settings)


@pytest.fixture(scope="module")
def template(stack: WishlistStack) -> Template:
    return Template.from_stack(stack)
