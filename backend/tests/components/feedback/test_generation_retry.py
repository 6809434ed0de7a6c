import asyncio

from interview_eval.components.feedback.json_output import Parsed, ParseFailure
from interview_eval.components.feedback.retry import generate_with_retry
from interview_eval.components.integrations.providers import GenerationError, GenerationOptions
from tests.fakes import FailingGenerator, ScriptedGenerator

OPTIONS = GenerationOptions()


def _parse_ok(raw):
    if raw == "ok":
        return Parsed({"value": raw})
    return ParseFailure("not ok", raw)


def test_first_success_stops_retrying():
    generator = ScriptedGenerator(lambda prompt, options: "ok")
    outcome = asyncio.run(generate_with_retry(generator, "p", OPTIONS, _parse_ok, max_retries=2))
    assert outcome.ok
    assert outcome.attempts == 1
    assert outcome.value == {"value": "ok"}
    assert len(generator.prompts) == 1


def test_recovers_after_bad_output():
    replies = iter(["garbage", GenerationError("503"), "ok"])
    generator = ScriptedGenerator(lambda prompt, options: next(replies))
    outcome = asyncio.run(generate_with_retry(generator, "p", OPTIONS, _parse_ok, max_retries=2))
    assert outcome.ok
    assert outcome.attempts == 3
    assert generator.prompts == ["p", "p", "p"]


def test_exhaustion_is_bounded_and_sleeps_between_attempts():
    generator = FailingGenerator("down")
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    outcome = asyncio.run(
        generate_with_retry(
            generator,
            "p",
            OPTIONS,
            _parse_ok,
            max_retries=2,
            delay_seconds=0.5,
            sleep=fake_sleep,
        )
    )
    assert not outcome.ok
    assert outcome.value is None
    assert outcome.attempts == 3
    assert outcome.last_error == "down"
    assert generator.calls == 3
    assert sleeps == [0.5, 0.5]


def test_zero_retries_means_one_attempt():
    generator = FailingGenerator()
    outcome = asyncio.run(generate_with_retry(generator, "p", OPTIONS, _parse_ok, max_retries=0))
    assert outcome.attempts == 1
    assert generator.calls == 1


def test_timeout_consumes_an_attempt():
    class SlowThenFast:
        def __init__(self):
            self.calls = 0

        async def generate(self, prompt, options):
            self.calls += 1
            if self.calls == 1:
                await asyncio.sleep(1)
            return "ok"

    generator = SlowThenFast()
    outcome = asyncio.run(
        generate_with_retry(generator, "p", OPTIONS, _parse_ok, max_retries=1, timeout_seconds=0.05)
    )
    assert outcome.ok
    assert outcome.attempts == 2
