"""End-to-end answer scoring with in-process providers."""

import asyncio

from interview_eval.components.feedback.narrative import FALLBACK_FEEDBACK
from interview_eval.components.integrations.providers import GenerationError
from interview_eval.components.scoring.rules import (
    FEEDBACK_COPIED,
    FEEDBACK_MEANINGLESS,
    FEEDBACK_OFF_TOPIC,
    FEEDBACK_TOO_SHORT,
    ISSUE_COPIED,
    ISSUE_INCOMPLETE,
    ISSUE_LENGTH_CAPPED,
    ISSUE_MEANINGLESS,
    ISSUE_OFF_TOPIC,
    ISSUE_TOO_SHORT,
)
from interview_eval.components.scoring.schemas import NarrativeFeedback
from interview_eval.components.scoring.service import check_completeness, score_answer
from interview_eval.platform.config import settings
from tests.fakes import FakeEmbedder, ScriptedGenerator, replying

OOP_QUESTION = "객체지향 프로그래밍의 특징은 무엇인가요?"
GOOD_ANSWER = (
    "객체지향 프로그래밍의 주요 특징은 캡슐화, 상속, 다형성, 추상화입니다. "
    "캡슐화는 데이터와 메서드를 하나의 객체로 묶고 내부 구현을 숨겨 외부에서는 공개된 인터페이스로만 접근하게 합니다. "
    "상속은 부모 클래스의 기능을 자식 클래스가 재사용하고 확장할 수 있게 해줍니다. "
    "다형성은 같은 메시지에 대해 객체마다 다르게 동작하도록 해서 유연한 설계를 가능하게 합니다. "
    "예를 들어 결제 모듈에서 카드 결제와 계좌 이체를 같은 인터페이스로 다루어 새로운 결제 수단을 2일 만에 추가할 수 있었습니다."
)


def _score(question, answer, embedder=None, generator=None):
    return asyncio.run(
        score_answer(
            question,
            answer,
            embedder=embedder or FakeEmbedder(),
            generator=generator or ScriptedGenerator(),
        )
    )


class TestGates:
    def test_too_short_answer_scores_zero_without_provider_calls(self):
        embedder = FakeEmbedder()
        generator = ScriptedGenerator()
        result = _score(OOP_QUESTION, "모르겠습니다", embedder, generator)
        assert result.score == 0
        assert result.issues == [ISSUE_TOO_SHORT]
        assert result.feedback == FEEDBACK_TOO_SHORT
        assert result.breakdown is None
        assert embedder.calls == []
        assert generator.prompts == []

    def test_length_is_measured_after_trimming(self):
        result = _score(OOP_QUESTION, "      짧은 답변      ")
        assert result.issues == [ISSUE_TOO_SHORT]

    def test_meaningless_answer(self):
        generator = ScriptedGenerator()
        result = _score(OOP_QUESTION, "ㅋㅋㅋㅋㅋㅋㅋㅋㅋㅋㅋㅋ", generator=generator)
        assert result.score == 0
        assert result.issues == [ISSUE_MEANINGLESS]
        assert result.feedback == FEEDBACK_MEANINGLESS
        assert generator.prompts == []

    def test_english_answer_passes_degenerate_gate(self):
        answer = (
            "I would use a hash map to get quick lookups, "
            "then sort the output by key to keep the report stable."
        )
        result = _score("해시 맵은 언제 사용하나요?", answer)
        assert ISSUE_MEANINGLESS not in result.issues
        assert result.breakdown is not None

    def test_off_topic_answer_scores_zero(self):
        answer = "데이터베이스 인덱스는 검색 속도를 높입니다"
        embedder = FakeEmbedder({OOP_QUESTION: [1.0, 0.0, 0.0], answer: [0.0, 1.0, 0.0]})
        result = _score(OOP_QUESTION, answer, embedder)
        assert result.score == 0
        assert result.issues == [ISSUE_OFF_TOPIC]
        assert result.feedback == FEEDBACK_OFF_TOPIC

    def test_weakly_related_answer_gets_partial_credit(self):
        answer = "데이터베이스 인덱스는 검색 속도를 높입니다"
        embedder = FakeEmbedder({OOP_QUESTION: [1.0, 0.0, 0.0], answer: [0.2, 0.9797958971, 0.0]})
        result = _score(OOP_QUESTION, answer, embedder)
        assert result.score == 4
        assert result.issues == [ISSUE_OFF_TOPIC]

    def test_failed_embeddings_read_as_off_topic(self):
        result = _score(OOP_QUESTION, GOOD_ANSWER, FakeEmbedder(default=[]))
        assert result.score == 0
        assert result.issues == [ISSUE_OFF_TOPIC]

    def test_copied_question(self):
        result = _score(OOP_QUESTION, "객체지향 프로그래밍의 특징은 무엇인가요?")
        assert result.score == 0
        assert result.issues == [ISSUE_COPIED]
        assert result.feedback.startswith(FEEDBACK_COPIED)
        assert "질문과 동일한 답변" in result.feedback


class TestFullScoring:
    def test_strong_answer(self):
        generator = ScriptedGenerator()
        result = _score(OOP_QUESTION, GOOD_ANSWER, generator=generator)
        assert result.score == 100
        assert result.issues == []
        assert isinstance(result.feedback, NarrativeFeedback)
        assert result.feedback.good
        assert result.breakdown is not None
        assert result.breakdown.length_cap is None
        assert result.breakdown.relevance_score == 25.0
        assert result.breakdown.semantic_score == 40.0
        assert result.breakdown.quality_score == 35.0

    def test_three_embeddings_are_requested(self):
        embedder = FakeEmbedder()
        _score(OOP_QUESTION, GOOD_ANSWER, embedder)
        assert len(embedder.calls) == 3
        assert OOP_QUESTION in embedder.calls
        assert GOOD_ANSWER in embedder.calls
        assert "객체지향, 캡슐화, 상속, 다형성, 추상화" in embedder.calls

    def test_keyword_extraction_failure_embeds_raw_question(self):
        embedder = FakeEmbedder()
        generator = ScriptedGenerator(replying(keywords=GenerationError("down")))
        result = _score(OOP_QUESTION, GOOD_ANSWER, embedder, generator)
        assert embedder.calls.count(OOP_QUESTION) == 2
        assert result.score == 100

    def test_short_answer_is_capped(self):
        answer = "캡슐화는 객체지향 프로그래밍에서 데이터와 메서드를 묶어 외부 접근을 제한하는 특징입니다."
        result = _score(OOP_QUESTION, answer)
        assert ISSUE_LENGTH_CAPPED in result.issues
        assert result.score in (45, 50)
        assert result.breakdown.length_cap == result.score

    def test_incomplete_answer_loses_twenty_points(self):
        generator = ScriptedGenerator(replying(completeness="NO"))
        result = _score(OOP_QUESTION, GOOD_ANSWER, generator=generator)
        assert result.score == 80
        assert result.issues == [ISSUE_INCOMPLETE]
        assert result.breakdown.completeness_penalty == 20

    def test_unusable_feedback_falls_back(self):
        generator = ScriptedGenerator(replying(feedback="피드백을 드릴 수 없습니다"))
        result = _score(OOP_QUESTION, GOOD_ANSWER, generator=generator)
        assert result.feedback == FALLBACK_FEEDBACK
        feedback_prompts = [p for p in generator.prompts if '"good"' in p]
        assert len(feedback_prompts) == 3

    def test_score_is_deterministic_for_same_inputs(self):
        first = _score(OOP_QUESTION, GOOD_ANSWER)
        second = _score(OOP_QUESTION, GOOD_ANSWER)
        assert first.score == second.score
        assert first.issues == second.issues


class TestCompletenessCheck:
    def _check(self, reply):
        generator = ScriptedGenerator(lambda prompt, options: reply)
        return asyncio.run(check_completeness(OOP_QUESTION, GOOD_ANSWER, generator))

    def test_yes_and_no(self):
        assert self._check("YES") is True
        assert self._check("no.") is False
        assert self._check("아니요, 일부만 답했습니다") is False

    def test_unrecognised_reply_counts_as_complete(self):
        assert self._check("잘 모르겠네요") is True

    def test_provider_failure_counts_as_complete(self):
        assert self._check(GenerationError("timeout")) is True


class HangingEmbedder(FakeEmbedder):
    """Never answers for the texts in ``stuck``."""

    def __init__(self, stuck):
        super().__init__()
        self.stuck = set(stuck)

    async def embed(self, text):
        if text in self.stuck:
            await asyncio.sleep(3600)
        return await super().embed(text)


def test_hanging_embedding_times_out_as_off_topic(monkeypatch):
    monkeypatch.setattr(settings, "PROVIDER_TIMEOUT_SECONDS", 0.05)
    result = _score(OOP_QUESTION, GOOD_ANSWER, HangingEmbedder({GOOD_ANSWER}))
    assert result.score == 0
    assert result.issues == [ISSUE_OFF_TOPIC]
