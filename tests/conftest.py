"""Test configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from dnav.config import reset_config

COMMITMENT_SENTENCE = (
    "Tesla will begin ramping Megafactory Shanghai in Q1 2025 and expand production capacity."
)

CASH_FLOW_TABLE = "CASH FLOWS (in millions of USD) 2024 2025 2026 2027 2028"

DISCLAIMER = (
    "This presentation contains forward-looking statements within the meaning of the "
    "Private Securities Litigation Reform Act. Actual results may differ materially from "
    "those expressed. We undertake no obligation to update these statements."
)

# One distinct, acceptable decision per page
LETTER_SENTENCES = [
    "We will open a distribution center in Ohio in 2025.",
    "The board approved a new battery plant for Texas next year.",
    "We plan to hire two hundred engineers by the end of the year.",
    "Management will launch the subscription tier in Q3 2025.",
    "We are expanding data center capacity in Oregon during 2026.",
    "We will reduce warehouse costs through automation next quarter.",
]

LETTER_HEADER = "ACME Holdings quarterly letter"


def letter_pages(count: int = len(LETTER_SENTENCES)) -> list[tuple[int, str]]:
    """Build pages with a running header and one decision sentence each."""
    return [
        (number, f"{LETTER_HEADER}\n\n{LETTER_SENTENCES[number - 1]}")
        for number in range(1, count + 1)
    ]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_memo(temp_dir):
    """Create a sample memo text file."""
    content = f"""Operating update

{COMMITMENT_SENTENCE}

{CASH_FLOW_TABLE}

{DISCLAIMER}
"""
    path = temp_dir / "memo.txt"
    path.write_text(content)
    return path


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state between tests."""
    yield
    reset_config()
