"""Validation of free-text AI build assessments.

The reply is untrusted text that is expected to contain a JSON object with a
yes/no verdict per axis plus a list of recommendations. Anything that does
not match that shape raises ParseError.
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional

from analyzer.exceptions import ParseError

AXES = ("cpu", "gpu", "ram", "storage", "resolution", "overall")

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class Assessment:
    cpu: Optional[bool] = None
    gpu: Optional[bool] = None
    ram: Optional[bool] = None
    storage: Optional[bool] = None
    resolution: Optional[bool] = None
    overall: Optional[bool] = None
    recommendations: List[str] = field(default_factory=list)

    def flagged(self) -> List[str]:
        return [axis for axis in AXES if getattr(self, axis) is True]

    def to_dict(self) -> dict:
        data = {
            f"{axis}_bottleneck": _to_answer(getattr(self, axis)) for axis in AXES
        }
        data["recommendations"] = list(self.recommendations)
        return data


def _to_answer(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "yes" if value else "no"


def _extract_object(text: str) -> dict:
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    raise ParseError("Reply does not contain a JSON object")


def _parse_answer(name: str, value) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        answer = value.strip().lower()
        if answer == "yes":
            return True
        if answer == "no":
            return False
    raise ParseError(f'"{name}" must be "yes" or "no", got {value!r}')


def parse_assessment(text) -> Assessment:
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty reply")

    payload = _extract_object(text)
    answers = {
        axis: _parse_answer(f"{axis}_bottleneck", payload.get(f"{axis}_bottleneck"))
        for axis in AXES
    }

    recommendations = payload.get("recommendations", [])
    if not isinstance(recommendations, list) or not all(
        isinstance(item, str) for item in recommendations
    ):
        raise ParseError('"recommendations" must be a list of strings')

    if all(value is None for value in answers.values()) and not recommendations:
        raise ParseError("Reply JSON has none of the expected assessment fields")

    return Assessment(
        recommendations=[item.strip() for item in recommendations if item.strip()],
        **answers,
    )
