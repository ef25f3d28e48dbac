"""Shared fixtures: an in-memory site with a course, a teacher and a quiz."""

import random
from dataclasses import dataclass

import pytest

from lms_plugins.host import Platform, Renderer, SessionStore, StringManager
from lms_plugins.host.generator import DataGenerator
from lms_plugins.host.request import RequestState


@pytest.fixture
def platform():
    return Platform()


@pytest.fixture
def gen(platform):
    return DataGenerator(platform)


@pytest.fixture
def strings():
    return StringManager("en")


@pytest.fixture
def output(strings):
    """Renderer with a seeded RNG so instance numbers are repeatable."""
    return Renderer(strings, rng=random.Random(42))


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def make_request(platform, sessions):
    def _make(user, **params):
        return RequestState(platform, user, sessions.get(user.id), params)
    return _make


@dataclass
class QuizSite:
    course: object
    teacher: object
    student: object
    quiz: object
    cm: object
    slots: list


@pytest.fixture
def quiz_site(platform, gen):
    """Course with a teacher, a student and a quiz of four 1-mark questions."""
    course = gen.create_course("C1")
    teacher = gen.create_user("teacher1", firstname="Terry", lastname="Teacher")
    student = gen.create_user("student1", firstname="Sam", lastname="Student")
    gen.enrol_teacher(teacher, course)
    quiz, cm = gen.create_quiz(course, "Quiz 1", grade=10.0)
    slots = [gen.add_question(quiz, f"Q{i}") for i in range(1, 5)]
    return QuizSite(course, teacher, student, quiz, cm, slots)
