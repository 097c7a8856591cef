"""
Text templates for the streamed review.

Every literal the composer emits lives here so the wire format can be read
in one place.
"""

import json

from .models import DetectedLanguage, Metrics


HEADER = "### 🧠 Mentor Analysis & Explanation\n"

OPTIMIZED_HEADER = "\n### ✨ Optimized Code\n"

CLOSING_FENCE = "\n```\n"

METRICS_OPEN = "<metrics>"
METRICS_CLOSE = "</metrics>"

TWO_LOOPS_WARNING = "⚠️ Two loops detected → Quadratic complexity."
DEEP_LOOPS_WARNING = "⚠️ Three or more loops detected → High time complexity."

EDGE_CASES = """
### 🧪 Edge Cases to Consider
- Empty input (empty list, empty string, None or null)
- Single element input
- Very large input sizes
- Duplicate values
- Negative numbers and zero
- Unexpected types or missing keys
"""

RANGE_LEN_SUGGESTION = "⚡ Suggestion: Iterate directly over list instead of using range(len())"
GENERIC_SUGGESTION = "✅ Suggestion: Reduce nested loops using hash-based structures"


DUPLICATE_USERS_CODE = '''def find_duplicate_users(users):
    print("Checking duplicates...")

    if not users:
        return

    seen = set()
    duplicates = set()

    # ✅ O(n) duplicate detection
    for user in users:
        username = user.get("username")
        if username in seen:
            duplicates.add(username)
        else:
            seen.add(username)

    for name in duplicates:
        print("Duplicate found:", name)

    # ✅ Efficient total age calculation
    total_age = sum(user.get("age", 0) for user in users)
    print("Total age:", total_age)

    # ✅ Safe dictionary access
    for user in users:
        print("Email:", user.get("email", "Not Provided"))
'''

MAX_SUBARRAY_CODE = '''def max_subarray(nums):
    if not nums:
        return 0

    # ✅ O(n) single pass, O(1) extra space
    best = current = nums[0]
    for value in nums[1:]:
        current = max(value, current + value)
        best = max(best, current)
    return best
'''


def build_language_line(language: DetectedLanguage) -> str:
    return f"Detected language: {language.label}\n\n"


def build_size_warning(line_count: int, max_lines: int) -> str:
    return (
        f"⚠️ Long snippet ({line_count} lines, limit {max_lines}) → "
        "consider splitting it into smaller functions."
    )


def build_opening_fence(tag: str) -> str:
    return f"```{tag}\n"


def build_comment(text: str, prefix: str = "#") -> str:
    """Render an advisory line appended below the code."""
    return f"\n{prefix} {text}"


def build_metrics_block(metrics: Metrics) -> str:
    """
    Serialize the terminal metrics fragment.

    Keys keep the model's field order with 2-space indentation.
    """
    payload = json.dumps(metrics.model_dump(), indent=2, ensure_ascii=False)
    return f"\n{METRICS_OPEN}\n{payload}\n{METRICS_CLOSE}\n"
