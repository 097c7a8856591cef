from __future__ import annotations

from textwrap import dedent

import pytest

from codementor.composer import generate
from codementor.models import AnalysisRequest, ReviewOptions


NESTED_JS = "for (let i=0;i<n;i++) for (let j=0;j<n;j++) console.log(i,j)"


@pytest.fixture
def nested_js() -> str:
    """Two loops and a debug print on one line."""
    return NESTED_JS


@pytest.fixture
def duplicate_users_py() -> str:
    """Triple loop brute-force duplicate check over usernames."""
    return dedent(
        """
        def find_duplicates(users):
            for i in range(len(users)):
                for j in range(len(users)):
                    for k in range(len(users)):
                        if users[i]["username"] == users[j]["username"]:
                            print("dup")
        """
    ).lstrip()


@pytest.fixture
def max_subarray_py() -> str:
    """Quadratic brute-force maximum subarray."""
    return dedent(
        """
        def max_subarray(nums):
            max_sum = nums[0]
            for i in range(len(nums)):
                current_sum = 0
                for j in range(i, len(nums)):
                    current_sum += nums[j]
                    max_sum = max(max_sum, current_sum)
            return max_sum
        """
    ).lstrip()


@pytest.fixture
def full_review(nested_js: str) -> str:
    """Complete streamed text for the nested JavaScript snippet."""
    return "".join(generate(AnalysisRequest(sourceText=nested_js)))


@pytest.fixture
def minimal_review(duplicate_users_py: str) -> str:
    options = ReviewOptions(profile="minimal")
    return "".join(generate(AnalysisRequest(sourceText=duplicate_users_py), options))
