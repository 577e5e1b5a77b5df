"""
Unit tests for the study session loop.

Most tests pin multiple-choice options with the correct answer at index 0
so scripted input can answer "0" for correct and "9" for wrong.
"""

import json
import random

import pytest

from rankdrill.deck import SetDeck
from rankdrill.scheduler import plan_iteration
from rankdrill.session import SessionPhase, StudySession
from rankdrill.state_store import ProgressStore

CORRECT_CHOICE = "0"
WRONG_CHOICE = "9"


@pytest.fixture
def pinned_options(monkeypatch):
    monkeypatch.setattr(
        "rankdrill.atoms.mcq.build_options",
        lambda answer, pool, count, rng=None: [answer] + [a for a in dict.fromkeys(pool) if a != answer][: count - 1],
    )


@pytest.fixture
def make_session(settings, console):
    def make(pattern="."):
        session = StudySession(
            SetDeck(settings.sets_dir, pattern=pattern),
            ProgressStore(settings.progress_file),
            settings=settings,
            console=console,
            rng=random.Random(0),
            sleep=lambda seconds: None,
        )
        session.load()
        return session

    return make


def saved(settings):
    return json.loads(settings.progress_file.read_text())


def write_progress(settings, **data):
    settings.progress_file.write_text(json.dumps(data))


@pytest.mark.usefixtures("pinned_options")
class TestIteration:
    """Full iterations through the loop."""

    def test_two_correct_answers_complete_iteration(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}, {"id": "b", "q": "dos", "a": "two"}])
        scripted_input(CORRECT_CHOICE, CORRECT_CHOICE, "y")

        session = make_session()
        summary = session.run()

        assert summary.correct == 2
        assert summary.iterations_completed == 1
        assert summary.exited_early is False
        assert session.phase is SessionPhase.SAVED
        assert saved(settings) == {
            "known": {"s/a": 1, "s/b": 1},
            "iteration": 1,
            "answeredInIteration": [],
        }

    def test_declining_exit_continues_with_next_iteration(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        # iteration 0: rank 0 -> 1; iteration 1: nothing due; iteration 2: due again at rank 1
        scripted_input(CORRECT_CHOICE, "n", "n", CORRECT_CHOICE, "y")

        summary = make_session().run()

        assert summary.iterations_completed == 3
        assert saved(settings)["known"] == {"s/a": 2}
        assert saved(settings)["iteration"] == 3

    def test_wrong_answer_demotes_and_prunes_zero(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}, {"id": "b", "q": "dos", "a": "two"}])
        write_progress(settings, known={"s/a": 1, "s/b": 1}, iteration=0)
        scripted_input(WRONG_CHOICE, WRONG_CHOICE, "y")

        summary = make_session().run()

        assert summary.wrong == 2
        assert saved(settings)["known"] == {}

    def test_empty_confirmation_continues(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        scripted_input(CORRECT_CHOICE, "", "y")

        summary = make_session().run()

        assert summary.iterations_completed == 2

    def test_free_response_for_familiar_questions(self, settings, write_set, make_session, scripted_input, console):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        write_progress(settings, known={"s/a": 2})
        scripted_input("one", "y")

        make_session().run()

        assert "FREE RESPONSE" in console.file.getvalue()
        assert saved(settings)["known"] == {"s/a": 3}

    def test_near_miss_confirmed(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        write_progress(settings, known={"s/a": 2})
        scripted_input("onr", "y", "y")

        make_session().run()

        assert saved(settings)["known"] == {"s/a": 3}

    def test_nothing_due_completes_immediately(self, settings, write_set, make_session, scripted_input, console):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        write_progress(settings, known={"s/a": 1}, iteration=1)
        fake = scripted_input("y")

        summary = make_session().run()

        assert fake.calls == 1
        assert summary.answered == 0
        assert saved(settings)["iteration"] == 2
        assert "Nothing due" in console.file.getvalue()


@pytest.mark.usefixtures("pinned_options")
class TestEarlyExit:
    """Aborted input saves and resumes."""

    def test_abort_mid_iteration_saves_resume_state(self, settings, spanish_set, make_session, scripted_input):
        scripted_input(CORRECT_CHOICE)

        summary = make_session().run()

        data = saved(settings)
        assert summary.exited_early is True
        assert summary.answered == 1
        assert data["iteration"] == 0
        assert len(data["answeredInIteration"]) == 1
        assert data["known"] == {data["answeredInIteration"][0]: 1}

    def test_restart_skips_answered_question(self, settings, spanish_set, make_session, scripted_input, console):
        scripted_input(CORRECT_CHOICE)
        make_session().run()
        answered_id = saved(settings)["answeredInIteration"][0]

        session = make_session()
        plan = plan_iteration(session.deck.get_all(), session.state, random.Random(5))

        assert answered_id not in {q.id for q in plan.queue}
        assert len(plan.queue) == 2
        assert plan.due_count == 3

        console.file.truncate(0)
        console.file.seek(0)
        fake = scripted_input(CORRECT_CHOICE, CORRECT_CHOICE, "y")
        summary = session.run()

        assert summary.answered == 2
        assert fake.calls == 3
        assert "Progress 33.3%" in console.file.getvalue()
        data = saved(settings)
        assert data["iteration"] == 1
        assert data["answeredInIteration"] == []
        assert set(data["known"].values()) == {1}

    def test_abort_before_any_answer_saves_unchanged(self, settings, spanish_set, make_session, scripted_input):
        scripted_input()

        make_session().run()

        assert saved(settings) == {"known": {}, "iteration": 0, "answeredInIteration": []}

    def test_abort_at_exit_prompt_saves(self, settings, write_set, make_session, scripted_input):
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}])
        scripted_input(CORRECT_CHOICE)

        summary = make_session().run()

        assert summary.exited_early is False
        assert saved(settings)["iteration"] == 1
        assert saved(settings)["known"] == {"s/a": 1}

    def test_abort_during_confirmation_saves(self, settings, write_set, make_session, scripted_input):
        # both answers are far from the first response and near the second
        write_set("s", [{"id": "a", "q": "uno", "a": "one"}, {"id": "b", "q": "unos", "a": "ones"}])
        write_progress(settings, known={"s/a": 2, "s/b": 2})
        scripted_input("xyzw", "onez")

        summary = make_session().run()

        assert summary.exited_early is True
        data = saved(settings)
        assert len(data["answeredInIteration"]) == 1
        assert sorted(data["known"].values()) == [1, 2]

    def test_other_sets_progress_survives(self, settings, spanish_set, write_set, make_session, scripted_input):
        write_set("french/colors", [{"id": "rouge", "q": "rouge", "a": "red"}])
        write_progress(settings, known={"french/colors/rouge": 4})
        scripted_input()

        make_session(pattern="spanish").run()

        assert saved(settings)["known"] == {"french/colors/rouge": 4}


class TestRenderedOptions:
    """Options as built for real, read back from the console."""

    ANSWERS = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel", "india"]

    def shown_options(self, output, question_text):
        """Pool answers listed under the panel for ``question_text``, before the feedback."""
        panel = next(part for part in output.split("MULTIPLE CHOICE") if question_text in part)
        listing = panel.split("Incorrect")[0]
        return [answer for answer in self.ANSWERS if answer in listing]

    def test_rank_zero_and_rank_one_option_tables(self, settings, write_set, make_session, scripted_input, console):
        questions = ["uno", "dos", "tres", "cuatro", "cinco", "seis", "siete", "ocho", "nueve"]
        write_set("s", [{"id": f"q{i}", "q": q, "a": a} for i, (q, a) in enumerate(zip(questions, self.ANSWERS))])
        # iteration 2: ranks 0 and 1 are due, rank 2 is not
        known = {f"s/q{i}": 2 for i in range(2, 9)}
        known["s/q1"] = 1
        write_progress(settings, known=known, iteration=2)
        scripted_input("99", "99", "y")

        summary = make_session().run()

        output = console.file.getvalue()
        rank_zero = self.shown_options(output, "uno")
        rank_one = self.shown_options(output, "dos")
        assert summary.answered == 2
        assert len(rank_zero) == 4
        assert "alpha" in rank_zero
        assert len(rank_one) == 8
        assert "bravo" in rank_one
        assert "[0-3]" in output
        assert "[0-7]" in output
