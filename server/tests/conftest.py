import os
import sys

import pytest

# Add server directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

import clink_samples  # noqa: E402


@pytest.fixture
def valid_code():
    """A code and diagonal value that pass the checksum."""
    return clink_samples.find_valid_code()


@pytest.fixture
def code_frame(valid_code):
    code, diagonal = valid_code
    return clink_samples.draw_clinkcode(code, diagonal)


@pytest.fixture
def code_tags():
    return clink_samples.corner_tags()


@pytest.fixture
def clink_data(code_tags):
    return clink_samples.build_clink_data(code_tags.values())
