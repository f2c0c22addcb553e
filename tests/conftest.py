from pathlib import Path

import pytest

from helpers.factories import SLEEP_URN
from survey_prompts.campaign import CampaignConfiguration, CampaignStore
from survey_prompts.formatter import DisplayValueFormatter
from survey_prompts.validator import PromptValidator

CAMPAIGN_DIR = Path(__file__).resolve().parent.parent / "campaigns"


@pytest.fixture(scope="session")
def store():
    s = CampaignStore(CAMPAIGN_DIR)
    s.load()
    return s


@pytest.fixture
def configuration(store):
    """Fresh configuration per test; custom choices recorded by one test stay local."""
    return CampaignConfiguration(store.get(SLEEP_URN).campaign)


@pytest.fixture
def validator():
    return PromptValidator()


@pytest.fixture
def formatter():
    return DisplayValueFormatter()
