"""prd.json structure validation.

The task list is written by an external agent, so the input here is any
decoded JSON value. Validation never raises: every problem is collected into
the returned ``ValidationResult``.
"""

from typing import Any, Dict, List

from claude_all.constants import BRANCH_PREFIX, STORY_ID_DIGITS, STORY_ID_PREFIX
from claude_all.models.prd import ValidationResult


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid priority
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def expected_story_id(position: int) -> str:
    """Return the story id implied by a 1-based list position."""
    return f"{STORY_ID_PREFIX}{position:0{STORY_ID_DIGITS}d}"


def _validate_story(story: Dict[str, Any], prefix: str) -> List[str]:
    errors = []

    if not _is_non_empty_str(story.get("id")):
        errors.append(f'{prefix}: Missing or invalid "id" field')

    if not _is_non_empty_str(story.get("title")):
        errors.append(f'{prefix}: Missing or invalid "title" field')

    if not _is_non_empty_str(story.get("description")):
        errors.append(f'{prefix}: Missing or invalid "description" field')

    if not isinstance(story.get("acceptanceCriteria"), list):
        errors.append(f'{prefix}: Missing or invalid "acceptanceCriteria" array')

    if not _is_number(story.get("priority")):
        errors.append(f'{prefix}: Missing or invalid "priority" field (must be number)')

    if not isinstance(story.get("passes"), bool):
        errors.append(f'{prefix}: Missing or invalid "passes" field (must be boolean)')

    if not isinstance(story.get("notes"), str):
        errors.append(f'{prefix}: Missing or invalid "notes" field (must be string)')

    return errors


def _priorities_are_sequential(priorities: List[Any]) -> bool:
    """Sorted priorities must be exactly 1..N."""
    if not all(_is_number(p) for p in priorities):
        return False
    return all(p == i for i, p in enumerate(sorted(priorities), start=1))


def _first_id_mismatch(ids: List[Any]) -> str:
    """Return the error for the first id out of sequence, or an empty string."""
    for position, story_id in enumerate(ids, start=1):
        expected = expected_story_id(position)
        if story_id != expected:
            return f"Story IDs should be sequential (expected {expected}, got {story_id})"
    return ""


def validate_prd_json(prd: Any) -> ValidationResult:
    """Validate a decoded prd.json value.

    Top-level fields are each checked independently, then every story's seven
    fields, then the priority and id sequences. The two sequence checks report
    at most one error each, for the first offending element.

    Args:
        prd: Any decoded JSON value

    Returns:
        ValidationResult with ``valid`` set when no errors were found
    """
    errors: List[str] = []
    data = _as_mapping(prd)

    if not _is_non_empty_str(data.get("project")):
        errors.append('Missing or invalid "project" field')

    branch_name = data.get("branchName")
    if not _is_non_empty_str(branch_name):
        errors.append('Missing or invalid "branchName" field')
    elif not branch_name.startswith(BRANCH_PREFIX):
        errors.append(f'branchName must start with "{BRANCH_PREFIX}"')

    if not _is_non_empty_str(data.get("description")):
        errors.append('Missing or invalid "description" field')

    stories = data.get("userStories")
    if not isinstance(stories, list):
        errors.append('Missing or invalid "userStories" array')
        return ValidationResult(valid=False, errors=errors)

    for index, story in enumerate(stories):
        errors.extend(_validate_story(_as_mapping(story), f"userStories[{index}]"))

    # Malformed stories still take part, with whatever values they carry
    priorities = [_as_mapping(story).get("priority") for story in stories]
    if not _priorities_are_sequential(priorities):
        errors.append("Priority numbers should be sequential starting from 1")

    id_error = _first_id_mismatch([_as_mapping(story).get("id") for story in stories])
    if id_error:
        errors.append(id_error)

    return ValidationResult(valid=not errors, errors=errors)
