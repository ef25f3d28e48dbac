"""Populate a platform from a YAML site description.

Example::

    users:
      - {username: admin, siteadmin: true}
      - {username: teacher1, firstname: Terry}
    courses:
      - shortname: C1
        groupmode: 1
        teachers: [teacher1]
        groups:
          - {name: Group A, members: [teacher1]}
        quizzes:
          - name: Quiz 1
            grade: 10
            groupmode: 2
            sections:
              - {firstslot: 1, heading: Listening}
              - {firstslot: 3, heading: Reading}
            questions:
              - {name: Q1, maxmark: 1}
            gradeitems:
              - {name: Listening, slots: [1, 2]}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from lms_plugins.exceptions import InvalidParameterError
from lms_plugins.host.generator import DataGenerator
from lms_plugins.host.store import Platform

logger = logging.getLogger(__name__)

_USER_FIELDS = ("firstname", "lastname", "siteadmin")
_COURSE_FIELDS = ("fullname", "groupmode", "groupmodeforce")


def load_site(path: Path | str, platform: Optional[Platform] = None) -> Platform:
    """Read *path* and build the site it describes."""
    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise InvalidParameterError(f"{path}: site file must be a mapping")
    platform = build_site(data, platform)
    logger.info("loaded site %s: %d users, %d courses, %d quizzes",
                path, len(platform.users), len(platform.courses), len(platform.quizzes))
    return platform


def build_site(data: Mapping[str, Any], platform: Optional[Platform] = None) -> Platform:
    platform = platform or Platform()
    gen = DataGenerator(platform)

    users = {}
    for spec in data.get("users") or []:
        fields = {k: spec[k] for k in _USER_FIELDS if k in spec}
        users[spec["username"]] = gen.create_user(spec["username"], **fields)

    def user(name: str):
        try:
            return users[name]
        except KeyError:
            raise InvalidParameterError(f"Unknown user {name!r} in site file") from None

    for cspec in data.get("courses") or []:
        fields = {k: cspec[k] for k in _COURSE_FIELDS if k in cspec}
        course = gen.create_course(cspec.get("shortname"), **fields)
        for name in cspec.get("teachers") or []:
            gen.enrol_teacher(user(name), course)

        groups = {}
        for gspec in cspec.get("groups") or []:
            group = gen.create_group(
                course, gspec.get("name"),
                [user(m) for m in gspec.get("members") or []],
                participation=gspec.get("participation", True),
            )
            groups[group.name] = group
        for gspec in cspec.get("groupings") or []:
            grouping = gen.create_grouping(course, gspec.get("name"),
                                           [groups[n] for n in gspec.get("groups") or []])
            if gspec.get("default"):
                course.defaultgroupingid = grouping.id

        for qspec in cspec.get("quizzes") or []:
            _build_quiz(gen, course, qspec)
    return platform


def _build_quiz(gen: DataGenerator, course, qspec: Mapping[str, Any]) -> None:
    quiz, _ = gen.create_quiz(
        course, qspec.get("name"),
        grade=qspec.get("grade", 10.0),
        groupmode=qspec.get("groupmode", 0),
    )
    slots = [
        gen.add_question(quiz, q.get("name"), maxmark=q.get("maxmark", 1.0), page=q.get("page"))
        for q in qspec.get("questions") or []
    ]
    for sspec in qspec.get("sections") or []:
        gen.create_section(quiz, int(sspec["firstslot"]), sspec.get("heading", ""),
                           bool(sspec.get("shufflequestions", False)))
    for ispec in qspec.get("gradeitems") or []:
        gen.create_grade_item(quiz, ispec["name"], [slots[n - 1] for n in ispec.get("slots") or []])
