"""
Serialization helpers for response stores and survey definitions.

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit:

    responses   {"responses": [{"path": [...], "type": tag, "value": ...}, ...]}
    definition  {"prelude": ..., "epilogue": ..., "questions": [question, ...]}

Entry order, path segments and value tags are preserved exactly.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from elicitor.errors import SerializationError
from elicitor.model import (
    NO_DEFAULT,
    AllOfQuestion,
    AnyOfQuestion,
    Assumed,
    ConfirmQuestion,
    DefaultValue,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    Suggested,
    SurveyDefinition,
    UnitQuestion,
)
from elicitor.paths import ResponsePath
from elicitor.responses import Responses
from elicitor.values import ResponseValue, value_from_raw


# =============================================================================
# RESPONSES
# =============================================================================


def value_to_dict(v: ResponseValue) -> Dict[str, Any]:
    raw = v.raw
    if isinstance(raw, tuple):
        raw = list(raw)
    return {"type": v.tag, "value": raw}


def value_from_dict(d: Dict[str, Any]) -> ResponseValue:
    try:
        return value_from_raw(d["type"], d.get("value"))
    except KeyError as exc:
        raise SerializationError(f"Response value is missing {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def responses_to_dict(r: Responses) -> Dict[str, Any]:
    return {
        "responses": [
            {"path": list(path.segments), **value_to_dict(value)}
            for path, value in r.items()
        ]
    }


def responses_from_dict(d: Dict[str, Any]) -> Responses:
    if not isinstance(d, dict):
        raise SerializationError(f"Expected a mapping, got {type(d).__name__}")
    r = Responses()
    for entry in d.get("responses", []):
        try:
            segments = entry["path"]
        except (KeyError, TypeError) as exc:
            raise SerializationError(f"Malformed response entry: {entry!r}") from exc
        r.insert(ResponsePath(tuple(str(s) for s in segments)), value_from_dict(entry))
    return r


def responses_to_json(r: Responses) -> str:
    return json.dumps(responses_to_dict(r))


def responses_from_json(s: str) -> Responses:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Invalid JSON: {exc}") from exc
    return responses_from_dict(d)


def responses_to_yaml(r: Responses) -> str:
    return yaml.safe_dump(responses_to_dict(r), sort_keys=False)


def responses_from_yaml(s: str) -> Responses:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as exc:
        raise SerializationError(f"Invalid YAML: {exc}") from exc
    return responses_from_dict(d)


# =============================================================================
# DEFINITIONS
# =============================================================================


def kind_to_dict(k: QuestionKind) -> Dict[str, Any]:
    d: Dict[str, Any] = {"kind": k.name}
    if isinstance(k, MaskedQuestion):
        d["mask"] = k.mask
    elif isinstance(k, (IntQuestion, FloatQuestion)):
        d["min"] = k.min
        d["max"] = k.max
    elif isinstance(k, ListQuestion):
        d["element"] = k.element
        d["min"] = k.min
        d["max"] = k.max
    elif isinstance(k, AllOfQuestion):
        d["questions"] = [question_to_dict(q) for q in k.questions]
    elif isinstance(k, OneOfQuestion):
        d["variants"] = [question_to_dict(q) for q in k.variants]
    elif isinstance(k, AnyOfQuestion):
        d["options"] = [question_to_dict(q) for q in k.options]
    return d


def kind_from_dict(d: Dict[str, Any]) -> QuestionKind:
    t = d.get("kind")
    if t == "unit":
        return UnitQuestion()
    if t == "input":
        return InputQuestion()
    if t == "multiline":
        return MultilineQuestion()
    if t == "masked":
        return MaskedQuestion(mask=d.get("mask", "*"))
    if t == "int":
        return IntQuestion(min=d.get("min"), max=d.get("max"))
    if t == "float":
        return FloatQuestion(min=d.get("min"), max=d.get("max"))
    if t == "confirm":
        return ConfirmQuestion()
    if t == "list":
        return ListQuestion(element=d.get("element", "string"), min=d.get("min"), max=d.get("max"))
    if t == "all_of":
        return AllOfQuestion(questions=tuple(question_from_dict(q) for q in d.get("questions", [])))
    if t == "one_of":
        return OneOfQuestion(variants=tuple(question_from_dict(q) for q in d.get("variants", [])))
    if t == "any_of":
        return AnyOfQuestion(options=tuple(question_from_dict(q) for q in d.get("options", [])))
    raise SerializationError(f"Unsupported question kind: {t}")


def default_to_dict(dv: DefaultValue) -> Dict[str, Any] | None:
    if isinstance(dv, Suggested):
        return {"policy": "suggested", **value_to_dict(dv.value)}
    if isinstance(dv, Assumed):
        return {"policy": "assumed", **value_to_dict(dv.value)}
    return None


def default_from_dict(d: Dict[str, Any] | None) -> DefaultValue:
    if d is None:
        return NO_DEFAULT
    policy = d.get("policy")
    if policy == "suggested":
        return Suggested(value_from_dict(d))
    if policy == "assumed":
        return Assumed(value_from_dict(d))
    raise SerializationError(f"Unsupported default policy: {policy}")


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "path": list(q.path.segments),
        "prompt": q.prompt,
        "optional": q.optional,
        "default": default_to_dict(q.default),
        **kind_to_dict(q.kind),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    try:
        path = ResponsePath(tuple(d["path"]))
        prompt = d["prompt"]
    except (KeyError, TypeError) as exc:
        raise SerializationError(f"Malformed question entry: {d!r}") from exc
    default = default_from_dict(d.get("default"))
    return Question(
        path=path,
        prompt=prompt,
        kind=kind_from_dict(d),
        default=default,
        optional=bool(d.get("optional", False)),
    )


def definition_to_dict(s: SurveyDefinition) -> Dict[str, Any]:
    return {
        "prelude": s.prelude,
        "epilogue": s.epilogue,
        "questions": [question_to_dict(q) for q in s.questions],
    }


def definition_from_dict(d: Dict[str, Any]) -> SurveyDefinition:
    if not isinstance(d, dict):
        raise SerializationError(f"Expected a mapping, got {type(d).__name__}")
    return SurveyDefinition(
        questions=tuple(question_from_dict(q) for q in d.get("questions", [])),
        prelude=d.get("prelude"),
        epilogue=d.get("epilogue"),
    )


def definition_to_json(s: SurveyDefinition) -> str:
    return json.dumps(definition_to_dict(s), sort_keys=True)


def definition_from_json(s: str) -> SurveyDefinition:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Invalid JSON: {exc}") from exc
    return definition_from_dict(d)


def definition_to_yaml(s: SurveyDefinition) -> str:
    return yaml.safe_dump(definition_to_dict(s), sort_keys=False)


def definition_from_yaml(s: str) -> SurveyDefinition:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as exc:
        raise SerializationError(f"Invalid YAML: {exc}") from exc
    return definition_from_dict(d)
