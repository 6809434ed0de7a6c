"""Scoring constants: thresholds, regex tables, stop words, and issue labels.

Everything here is built once at import time and treated as read-only.
"""

import re

# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------
TOKEN_PATTERN = re.compile(r"[\w가-힣]+")
NON_WORD_PATTERN = re.compile(r"[^\w가-힣]+")
MEANINGFUL_TOKEN_PATTERN = re.compile(r"^[a-z가-힣]{2,}$")

STOP_WORDS = frozenset({
    # Korean fillers, pronouns, and connective words
    "그리고", "그러나", "그런데", "그래서", "하지만", "또한", "또는", "및", "등",
    "이", "그", "저", "것", "수", "때", "중", "더", "좀", "잘", "안", "못",
    "이것", "그것", "저것", "여기", "거기", "무엇", "어떤", "어떻게", "왜",
    "있다", "없다", "하다", "되다", "이다", "있습니다", "없습니다", "합니다",
    "입니다", "됩니다", "있는", "하는", "되는", "같은", "대한", "대해", "위해",
    "통해", "관련", "경우", "때문", "때문에", "정도", "부분", "생각", "생각합니다",
    "설명해", "설명해주세요", "말씀해", "말씀해주세요", "주세요", "무엇인가요",
    "무엇입니까", "인가요", "있나요", "있을까요", "까요", "나요", "에요", "예요",
    # English function words
    "a", "an", "the", "and", "or", "but", "if", "of", "to", "in", "on", "at",
    "for", "with", "by", "from", "as", "is", "are", "was", "were", "be", "been",
    "it", "its", "this", "that", "these", "those", "what", "which", "who",
    "how", "why", "do", "does", "did", "can", "could", "would", "should",
    "you", "your", "i", "we", "they", "he", "she", "me", "my", "our",
    "about", "into", "than", "then", "so", "not", "no", "yes",
})

# Trailing Korean particles (josa), longest first so "에서" wins over "에".
JOSA_SUFFIXES = (
    "에서는", "으로는", "에게서", "까지는",
    "에서", "으로", "에게", "까지", "부터", "처럼", "보다", "이나", "라는", "이란",
    "은", "는", "이", "가", "을", "를", "의", "에", "로", "와", "과", "도", "만", "란",
)

# ---------------------------------------------------------------------------
# Copy / plagiarism detection
# ---------------------------------------------------------------------------
COPY_CONTAINMENT_LENGTH_RATIO = 1.3
COPY_LCS_RATIO = 0.4
COPY_LCS_MIN_LENGTH = 15
COPY_NGRAM_SIZE = 4
COPY_NGRAM_RATIO = 0.5
COPY_EDIT_SIMILARITY = 0.85
COPY_EDIT_LENGTH_GAP = 0.5
COPY_WORD_OVERLAP_RATIO = 0.7
COPY_WORD_OVERLAP_LENGTH_RATIO = 1.8

# ---------------------------------------------------------------------------
# Degenerate input detection
# ---------------------------------------------------------------------------
DOMINANT_CHAR_RATIO = 0.8
REPEAT_PREFIX_SIZES = (2, 3, 4)
REPEAT_PREFIX_MIN_COUNT = 5
REPEAT_PREFIX_COVERAGE = 0.7
MEANINGFUL_TOKEN_MIN_COUNT = 2
MEANINGFUL_CHECK_MIN_LENGTH = 20
KEYBOARD_MASH_COVERAGE = 0.5

KEYBOARD_ROWS = ("qwertyuiop", "asdfghjkl", "zxcvbnm")
KEYBOARD_RUN_LENGTH = 4

# Every run of KEYBOARD_RUN_LENGTH physically adjacent keys, in both directions
# ("asdf", "sdfg", ..., "fdsa"). Row letters alone are not enough: "output"
# and "typewriter" are typed entirely on the top row.
KEYBOARD_ADJACENT_RUNS = frozenset(
    run
    for row in KEYBOARD_ROWS
    for i in range(len(row) - KEYBOARD_RUN_LENGTH + 1)
    for run in (row[i:i + KEYBOARD_RUN_LENGTH], row[i:i + KEYBOARD_RUN_LENGTH][::-1])
)

KEYBOARD_MASH_PATTERNS = (
    # 2-beolsik keys typed without composing syllables
    re.compile(r"[ㄱ-ㅎㅏ-ㅣ]{4,}"),
    re.compile(r"(\d)\1{2,}"),
)

# ---------------------------------------------------------------------------
# Pipeline gates
# ---------------------------------------------------------------------------
MIN_ANSWER_LENGTH = 10
TOPIC_SIMILARITY_THRESHOLD = 0.25
TOPIC_ZERO_THRESHOLD = 0.15
TOPIC_PARTIAL_MULTIPLIER = 20

# ---------------------------------------------------------------------------
# Sub-score bounds
# ---------------------------------------------------------------------------
RELEVANCE_MAX = 25.0
RELEVANCE_KEYWORD_POINTS = 15.0
RELEVANCE_EMBEDDING_POINTS = 10.0
RELEVANCE_SIMILARITY_FLOOR = 0.2
RELEVANCE_SIMILARITY_CEILING = 0.5
SEMANTIC_MAX = 40.0
QUALITY_MAX = 35.0

# (upper bound exclusive, points)
LENGTH_TIERS = ((20, 5), (50, 10), (80, 13))
LENGTH_TIER_TOP = 15
SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
SPECIFICITY_BASE = 5
SPECIFICITY_EXAMPLE_BONUS = 2
SPECIFICITY_DIGIT_BONUS = 2
SPECIFICITY_LONG_WORD_BONUS = 3
SPECIFICITY_LONG_WORD_LENGTH = 5
SPECIFICITY_MAX = 10
EXAMPLE_PATTERN = re.compile(
    r"(예를\s*들어|예를\s*들면|예시|예로|실제로|사례|경험|for example|for instance|e\.g\.|such as)",
    re.IGNORECASE,
)

REPEATED_WORD_MIN_LENGTH = 3
REPEATED_WORD_MAX_COUNT = 7
REPEATED_WORD_PENALTY = 5
FEW_WORDS_THRESHOLD = 5
FEW_WORDS_PENALTY = 15

# (trimmed length upper bound exclusive, cap); >= 200 is uncapped
LENGTH_CAPS = ((50, 45), (80, 50), (120, 60), (150, 70), (200, 80))

# ---------------------------------------------------------------------------
# Keyword / complexity penalties
# ---------------------------------------------------------------------------
COMPLEX_QUESTION_PATTERNS = (
    re.compile(r"무엇.*(무엇|어떤|왜|이유)"),
    re.compile(r"어떤.*(어떤|왜|무엇|이유)"),
    re.compile(r"왜.*(무엇|어떤|방법)"),
    re.compile(r"차이"),
    re.compile(r"나열"),
    re.compile(r"(장점|단점).*(단점|장점)"),
    re.compile(r"\b(compare|difference|differences|pros and cons|list)\b", re.IGNORECASE),
)
COMPLEX_QUESTION_MARK_COUNT = 2
COMPLEX_SHORT_ANSWER_LENGTH = 150
COMPLEX_SHORT_ANSWER_PENALTY = 10
COMPLEX_LOW_COVERAGE = 0.3
COMPLEX_LOW_COVERAGE_PENALTY = 15

SPECIFICS_DEMAND_PATTERN = re.compile(
    r"(무엇|어떤|나열|설명|종류|방법|\bwhat\b|\bwhich\b|\blist\b|\bexplain\b|\bdescribe\b|\btypes?\b|\bhow\b)",
    re.IGNORECASE,
)
SPECIFICS_LONG_WORD_LENGTH = 6
BULLET_PATTERN = re.compile(r"(?m)^\s*(?:[-*•·]|\d+[.)])\s+")
MISSING_SPECIFICS_PENALTY = 10

LOW_COVERAGE = 0.2
LOW_COVERAGE_MIN_KEYWORDS = 3
LOW_COVERAGE_PENALTY = 5

INCOMPLETE_ANSWER_PENALTY = 20

# ---------------------------------------------------------------------------
# Issue labels (surfaced verbatim to the caller)
# ---------------------------------------------------------------------------
ISSUE_TOO_SHORT = "답변이 너무 짧습니다"
ISSUE_MEANINGLESS = "의미 없는 답변입니다"
ISSUE_OFF_TOPIC = "질문과 관련 없는 답변입니다"
ISSUE_COPIED = "질문을 그대로 옮긴 답변입니다"
ISSUE_REPEATED_WORDS = "같은 단어가 지나치게 반복됩니다"
ISSUE_FEW_WORDS = "답변에 사용된 단어가 너무 적습니다"
ISSUE_LENGTH_CAPPED = "답변 길이가 충분하지 않아 점수가 제한되었습니다"
ISSUE_COMPLEX_TOO_SHORT = "복합 질문에 비해 답변이 짧습니다"
ISSUE_COMPLEX_LOW_COVERAGE = "복합 질문의 핵심 요소를 충분히 다루지 않았습니다"
ISSUE_MISSING_SPECIFICS = "구체적인 예시나 근거가 부족합니다"
ISSUE_LOW_KEYWORD_COVERAGE = "질문의 핵심 키워드를 거의 다루지 않았습니다"
ISSUE_INCOMPLETE = "질문의 요구사항에 충분히 답하지 않았습니다"

FEEDBACK_TOO_SHORT = "답변이 너무 짧아 평가할 수 없습니다. 최소 10자 이상 작성해주세요."
FEEDBACK_MEANINGLESS = "의미를 파악할 수 없는 답변입니다. 질문에 대한 생각을 문장으로 작성해주세요."
FEEDBACK_OFF_TOPIC = "질문과 관련된 내용이 거의 없습니다. 질문의 주제에 맞춰 다시 답변해주세요."
FEEDBACK_COPIED = "질문을 그대로 옮기거나 거의 동일하게 작성한 답변입니다. 자신의 말로 답변해주세요."
