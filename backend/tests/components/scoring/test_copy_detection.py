import pytest

from interview_eval.components.scoring.copy_detection import (
    detect_copy,
    edit_similarity,
    levenshtein_distance,
    longest_common_substring,
    ngram_overlap,
    normalize_for_copy,
    word_overlap,
)

OOP_QUESTION = "객체지향 프로그래밍의 특징은 무엇인가요?"


def test_normalize_drops_punctuation_whitespace_and_case():
    assert normalize_for_copy("What is  Polymorphism?") == "whatispolymorphism"
    assert normalize_for_copy("snake_case 변수") == "snakecase변수"


def test_longest_common_substring():
    assert longest_common_substring("abcdef", "zcdez") == 3
    assert longest_common_substring("", "abc") == 0


def test_ngram_overlap():
    assert ngram_overlap("abcd", "xxabcdxx") == 1.0
    assert ngram_overlap("abc", "abc") == 0.0


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "") == 0


def test_levenshtein_short_circuits_on_large_length_gap():
    assert levenshtein_distance("a", "abcdefgh") == 8


def test_edit_similarity():
    assert edit_similarity("abcd", "abcd") == 1.0
    assert edit_similarity("", "") == 0.0


def test_word_overlap_ignores_stop_words():
    assert word_overlap("리스트 튜플 차이", "the 튜플 리스트") == 1.0
    assert word_overlap("리스트 튜플", "전혀 다른 내용") == 0.0


class TestDetectCopy:
    def test_exact_copy_after_normalization(self):
        verdict = detect_copy("What is polymorphism?", "what is polymorphism")
        assert verdict.is_copied is True
        assert verdict.reason == "질문과 동일한 답변"
        assert verdict.copy_ratio == 1.0

    def test_question_contained_with_little_added(self):
        verdict = detect_copy(OOP_QUESTION, "객체지향 프로그래밍의 특징은 무엇인가요? 네.")
        assert verdict.is_copied is True
        assert verdict.reason == "질문 전체를 거의 그대로 포함한 답변"
        assert verdict.copy_ratio == pytest.approx(18 / 19, abs=1e-4)

    def test_reordered_question_words(self):
        verdict = detect_copy("리스트 튜플 딕셔너리 집합 차이", "집합 딕셔너리 튜플 리스트 차이")
        assert verdict.is_copied is True
        assert verdict.reason == "질문의 단어를 재배열한 답변"

    def test_original_answer_is_not_copied(self):
        answer = (
            "객체지향 프로그래밍의 주요 특징은 캡슐화, 상속, 다형성, 추상화입니다. "
            "캡슐화는 데이터와 메서드를 하나의 객체로 묶어 내부 구현을 숨깁니다."
        )
        verdict = detect_copy(OOP_QUESTION, answer)
        assert verdict.is_copied is False
        assert verdict.reason == ""

    def test_empty_after_normalization_is_not_copied(self):
        assert detect_copy("???", "!!!").is_copied is False

    def test_disjoint_vocabulary_is_not_copied(self):
        verdict = detect_copy("What is a hash table?", "Buckets keyed by digest values give constant lookups.")
        assert verdict.is_copied is False
        assert verdict.copy_ratio is None


class TestDetectCopyRuleOrder:
    LETTERS = "abcdefghijklmnopqrst"
    ALNUM = "abcdefghijklmnopqrstuvwxyz0123456789"

    def test_long_shared_passage(self):
        verdict = detect_copy(self.LETTERS, "abcdefghijklmnop" + "0123456789" * 2)
        assert verdict.is_copied is True
        assert verdict.reason == "질문의 긴 구절을 그대로 사용한 답변"
        assert verdict.copy_ratio == pytest.approx(16 / 20)

    def test_shared_passage_under_minimum_length_falls_through_to_ngrams(self):
        # longest shared run is 10 characters; 14 of 17 4-grams survive
        verdict = detect_copy(self.LETTERS, "abcdefghij9klmnopqrst")
        assert verdict.is_copied is True
        assert verdict.reason == "질문과 표현이 대부분 겹치는 답변"
        assert verdict.copy_ratio == pytest.approx(14 / 17, abs=1e-4)

    def test_scattered_substitutions(self):
        # five substitutions break 20 of 33 4-grams but keep the text 86% similar
        answer = "abc가efghij가lmnopq가stuvwx가z01234가6789"
        assert ngram_overlap(self.ALNUM, answer) <= 0.5
        verdict = detect_copy(self.ALNUM, answer)
        assert verdict.is_copied is True
        assert verdict.reason == "질문을 약간만 바꾼 답변"
        assert verdict.copy_ratio == pytest.approx(1 - 5 / 36, abs=1e-4)

    def test_one_substitution_too_many(self):
        answer = "abc가efghij가lmnopq가stuvwx가z01234가678가"
        assert detect_copy(self.ALNUM, answer).is_copied is False
