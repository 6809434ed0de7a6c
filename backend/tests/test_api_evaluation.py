"""HTTP surface of the evaluation service."""

from interview_eval.components.scoring.rules import ISSUE_TOO_SHORT
from interview_eval.deps import get_generation_provider
from interview_eval.main import app
from interview_eval.models.history import HistoryStatus
from tests.conftest import TestingSessionLocal, create_history, create_user
from tests.fakes import FailingGenerator

QUESTION = "객체지향 프로그래밍의 특징은 무엇인가요?"
ANSWER = (
    "객체지향 프로그래밍의 주요 특징은 캡슐화, 상속, 다형성, 추상화입니다. "
    "캡슐화는 데이터와 메서드를 하나의 객체로 묶고 내부 구현을 숨겨 외부에서는 공개된 인터페이스로만 접근하게 합니다. "
    "상속은 부모 클래스의 기능을 자식 클래스가 재사용하고 확장할 수 있게 해줍니다. "
    "다형성은 같은 메시지에 대해 객체마다 다르게 동작하도록 해서 유연한 설계를 가능하게 합니다. "
    "예를 들어 결제 모듈에서 카드 결제와 계좌 이체를 같은 인터페이스로 다루어 새로운 결제 수단을 2일 만에 추가할 수 있었습니다."
)


def _seed(**history_fields):
    db = TestingSessionLocal()
    try:
        user = create_user(db)
        history = create_history(db, user, **history_fields)
        return user.id, history.id
    finally:
        db.close()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["database"] is True


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


class TestScoreEndpoint:
    def test_short_answer(self, client):
        resp = client.post("/api/evaluation/score", json={"question": QUESTION, "answer": "모르겠습니다"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["score"] == 0
        assert data["issues"] == [ISSUE_TOO_SHORT]
        assert isinstance(data["feedback"], str)

    def test_full_answer(self, client):
        resp = client.post("/api/evaluation/score", json={"question": QUESTION, "answer": ANSWER})
        assert resp.status_code == 200
        data = resp.json()
        assert data["score"] == 100
        assert set(data["feedback"]) == {"good", "improvement", "recommendation"}
        assert data["breakdown"]["semantic_score"] == 40.0

    def test_missing_question_is_422(self, client):
        resp = client.post("/api/evaluation/score", json={"answer": ANSWER})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["loc"][-1] == "question"


class TestFeedbackEndpoints:
    def test_patch_scores_existing_history(self, client):
        user_id, history_id = _seed()
        resp = client.patch(
            f"/api/evaluation/feedback/{history_id}",
            json={"question": QUESTION, "answer": ANSWER},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["history_id"] == history_id
        assert data["user_id"] == user_id
        assert data["total_points"] == 100

    def test_repeated_patch_does_not_double_points(self, client):
        _, history_id = _seed()
        body = {"question_id": 5, "question": QUESTION, "answer": ANSWER}
        client.patch(f"/api/evaluation/feedback/{history_id}", json=body)
        resp = client.patch(f"/api/evaluation/feedback/{history_id}", json=body)
        assert resp.status_code == 200
        assert resp.json()["total_points"] == 100

    def test_patch_unknown_history_is_404(self, client):
        resp = client.patch("/api/evaluation/feedback/999", json={"question": QUESTION, "answer": ANSWER})
        assert resp.status_code == 404

    def test_post_creates_new_history(self, client):
        _, history_id = _seed(answer="이전 답변", score=20, status=HistoryStatus.COMPLETED)
        resp = client.post(
            f"/api/evaluation/feedback/{history_id}",
            json={"question": QUESTION, "answer": ANSWER},
        )
        assert resp.status_code == 201
        assert resp.json()["history_id"] != history_id

    def test_model_answer(self, client):
        resp = client.post("/api/evaluation/feedback", json={"question": QUESTION})
        assert resp.status_code == 200
        data = resp.json()
        assert data["question"] == QUESTION
        assert data["answer"]

    def test_model_answer_failure_is_502(self, client):
        app.dependency_overrides[get_generation_provider] = lambda: FailingGenerator()
        resp = client.post("/api/evaluation/feedback", json={"question": QUESTION})
        assert resp.status_code == 502


class TestAnalysisEndpoint:
    def test_analysis(self, client):
        user_id, _ = _seed(answer=ANSWER, score=90, status=HistoryStatus.COMPLETED)
        resp = client.get(f"/api/evaluation/analysis/{user_id}")
        assert resp.status_code == 200
        data = resp.json()
        assert set(data["scores"]) == {
            "logical_thinking",
            "communication",
            "technical_knowledge",
            "problem_solving",
            "attitude",
            "growth_potential",
        }
        assert data["answer_count"] == 1
        assert data["low_confidence"] is True

    def test_no_history_is_404(self, client):
        user_id, _ = _seed()
        resp = client.get(f"/api/evaluation/analysis/{user_id}")
        assert resp.status_code == 404

    def test_unknown_user_is_404(self, client):
        assert client.get("/api/evaluation/analysis/4242").status_code == 404

    def test_generation_failure_is_502(self, client):
        user_id, _ = _seed(answer=ANSWER, score=90, status=HistoryStatus.COMPLETED)
        app.dependency_overrides[get_generation_provider] = lambda: FailingGenerator()
        resp = client.get(f"/api/evaluation/analysis/{user_id}")
        assert resp.status_code == 502
