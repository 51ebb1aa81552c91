"""Heuristic NLP analysis of page text.

Everything here is dictionary and regex based so results are deterministic
and need no model downloads: keyword density and stuffing, topic clusters,
vocabulary and sentence statistics, sentiment, tone, capitalization-based
entity spotting, content type, AI readability (passive voice, jargon,
transitions) and the gaps worth fixing.
"""
from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import asdict, dataclass, field

import textstat
from bs4 import BeautifulSoup

from src.config.settings import NLPSettings, settings

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "have", "this", "but", "they", "not",
    "or", "had", "can", "their", "which", "you", "been", "than", "more",
    "when", "so", "these", "would", "other", "into", "could", "our", "should",
    "your", "there", "some", "were", "them", "his", "her", "also", "about",
    "only", "may", "such", "no", "what", "up", "out", "if", "who", "get",
    "all", "we", "my", "do", "me", "one", "she", "how", "am", "here", "over",
})

FUNCTION_WORDS = STOP_WORDS | {
    "then", "where", "why", "just", "even", "any", "through", "because",
    "those", "much", "before", "after", "being", "under", "while", "again",
}

ABSTRACT_TERMS = (
    "concept", "theory", "principle", "approach", "methodology", "framework",
    "strategy", "philosophy", "ideology", "paradigm", "model", "system",
    "process", "development", "innovation", "transformation", "evolution",
    "perspective", "dimension", "aspect", "factor", "element", "component",
)

TECHNICAL_DOMAINS: dict[str, tuple[str, ...]] = {
    "technology": ("software", "algorithm", "database", "api", "code", "programming", "server", "cloud", "data", "system"),
    "business": ("revenue", "strategy", "market", "customer", "sales", "growth", "roi", "investment", "profit", "management"),
    "science": ("research", "study", "analysis", "hypothesis", "experiment", "data", "methodology", "results", "conclusion", "evidence"),
    "medical": ("patient", "treatment", "diagnosis", "symptoms", "disease", "medical", "health", "clinical", "therapy", "prescription"),
    "legal": ("law", "legal", "contract", "agreement", "rights", "regulation", "compliance", "policy", "jurisdiction", "litigation"),
}

POSITIVE_WORDS = frozenset({
    "good", "great", "excellent", "best", "amazing", "wonderful", "fantastic", "perfect", "outstanding",
    "superior", "innovative", "effective", "powerful", "successful", "beneficial",
})
NEGATIVE_WORDS = frozenset({
    "bad", "poor", "worst", "terrible", "awful", "horrible", "fail", "failure", "weak", "inferior",
    "ineffective", "useless", "problematic", "difficult", "issue",
})

TONE_TERMS: dict[str, tuple[str, ...]] = {
    "formal": ("therefore", "furthermore", "consequently", "nevertheless", "moreover", "thus", "hence", "accordingly"),
    "conversational": ("you're", "we're", "let's", "you'll", "really", "very", "pretty", "quite", "basically"),
    "technical": tuple(sorted({term for terms in TECHNICAL_DOMAINS.values() for term in terms})),
    "persuasive": ("should", "must", "need", "can", "will help", "best", "proven", "guarantee", "ensure", "improve"),
}

CONTENT_TYPE_SIGNALS: dict[str, tuple[str, ...]] = {
    "informational": ("what is", "how to", "guide", "tutorial", "learn", "understand", "explain", "definition"),
    "commercial": ("buy", "price", "cost", "discount", "sale", "offer", "deal", "shop", "product"),
    "transactional": ("download", "register", "signup", "subscribe", "order", "purchase", "contact", "request"),
    "navigational": ("home", "about", "contact", "services", "products", "login", "account"),
}
CONTENT_INTENTS = {
    "informational": "educate",
    "commercial": "sell",
    "transactional": "convert",
    "navigational": "navigate",
}

ORGANIZATION_MARKERS = ("Inc", "LLC", "Corp", "Ltd", "GmbH")

TRANSITION_WORDS = (
    "however", "therefore", "moreover", "furthermore", "additionally",
    "consequently", "meanwhile", "subsequently", "nevertheless", "nonetheless",
    "thus", "hence", "accordingly", "similarly", "likewise",
    "in contrast", "on the other hand", "for example", "for instance",
    "in addition", "as a result", "in conclusion", "in summary",
)

_NON_TOKEN = re.compile(r"[^a-z0-9\s'-]")
_ENTITY = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*\b")
_SENTENCE_END = re.compile(r"[.!?]+")
_PASSIVE = re.compile(r"\b(?:is|are|was|were|be|been|being)\s+\w+(?:ed|en)\b", re.IGNORECASE)
_JARGON = (
    re.compile(r"\w{15,}"),
    re.compile(r"\b[A-Z]{3,}\b"),
    re.compile(r"\w+ization\b", re.IGNORECASE),
    re.compile(r"\w+ology\b", re.IGNORECASE),
)
_TRANSITION = re.compile(r"\b(?:" + "|".join(re.escape(t) for t in TRANSITION_WORDS) + r")\b", re.IGNORECASE)
_INFORMATION = (re.compile(r"\d+"), re.compile(r"\b[A-Z][a-z]+"), re.compile(r"\w{10,}"))

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Keyword:
    word: str
    frequency: int
    density: float


@dataclass(frozen=True)
class TopicCluster:
    topic: str
    relevance: float
    keywords: list[str]


@dataclass
class Entities:
    people: list[str] = field(default_factory=list)
    organizations: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    products: list[str] = field(default_factory=list)
    concepts: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(v) for v in (self.people, self.organizations, self.locations, self.products, self.concepts))


@dataclass
class ContentAnalysis:
    """Result of ``analyze_content``; plain data, serializable with ``to_dict``."""
    word_count: int
    # Uniqueness & quality
    content_uniqueness_score: int
    estimated_originality: float
    duplicate_content_risk: str
    # Keywords
    primary_keywords: list[Keyword]
    secondary_keywords: list[Keyword]
    keyword_density: float
    keyword_stuffing_risk: str
    keyword_distribution: str
    # Topics
    detected_topics: list[TopicCluster]
    topic_cohesion: float
    topic_diversity: float
    main_topic: str
    subtopics: list[str]
    # Semantics
    semantic_richness: int
    vocabulary_diversity: float
    lexical_density: float
    abstract_concept_ratio: float
    # Sentences
    average_sentence_length: float
    sentence_length_stddev: float
    sentence_length_variety: str
    sentence_complexity_score: float
    # AI readability
    ai_comprehension_score: int
    structural_clarity: int
    information_density: float
    contextual_coherence: float
    readability_score: float | None
    passive_voice_percentage: int
    jargon_density: int
    transition_words: int
    sentence_complexity: str
    has_clear_structure: bool
    ai_readability_score: int
    # Classification
    content_type: str
    content_intent: list[str]
    target_audience: str
    # Sentiment & tone
    sentiment_score: float
    sentiment_label: str
    tone: dict[str, float]
    entities: Entities
    # Gaps
    content_gaps: list[str] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def tokenize(text: str, min_length: int = 3) -> list[str]:
    """Lower-case word tokens; punctuation other than ' and - separates words."""
    cleaned = _NON_TOKEN.sub(" ", text.lower())
    return [word for word in cleaned.split() if len(word) >= min_length]


def extract_keywords(words: list[str], top_n: int = 10) -> list[Keyword]:
    """Most frequent non-stop words with density as a share of non-stop tokens.

    Ties keep first-occurrence order so the ranking is stable.
    """
    content = [w for w in words if w not in STOP_WORDS]
    if not content:
        return []
    total = len(content)
    counts = Counter(content)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [
        Keyword(word=word, frequency=freq, density=freq / total * 100)
        for word, freq in ranked[:top_n]
    ]


def detect_keyword_stuffing(keywords: list[Keyword], config: NLPSettings | None = None) -> str:
    config = config or settings.nlp
    if not keywords:
        return "none"
    max_density = max(kw.density for kw in keywords)
    if max_density > config.stuffing_high_density:
        return "high"
    if max_density > config.stuffing_low_density:
        return "low"
    return "none"


def _paragraphs(text: str) -> list[str]:
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    if len(paragraphs) <= 1:
        paragraphs = [p for p in text.splitlines() if p.strip()]
    return paragraphs or [text]


def analyze_keyword_distribution(text: str, keywords: list[str]) -> str:
    if not keywords:
        return "natural"
    paragraphs = _paragraphs(text)
    counts = [sum(1 for kw in keywords if kw in para.lower()) for para in paragraphs]
    average = sum(counts) / len(paragraphs)
    if max(counts) > average * 3:
        return "over-optimized"
    if average > 2:
        return "forced"
    return "natural"


def cluster_topics(keywords: list[Keyword]) -> list[TopicCluster]:
    """Map keywords onto the fixed domain dictionaries."""
    topics = []
    for domain, domain_words in TECHNICAL_DOMAINS.items():
        matching = [kw.word for kw in keywords if any(dw in kw.word or kw.word in dw for dw in domain_words)]
        if matching:
            topics.append(TopicCluster(
                topic=domain.capitalize(),
                relevance=len(matching) / len(keywords) * 100,
                keywords=matching[:5],
            ))
    if not topics:
        topics.append(TopicCluster(topic="General", relevance=100.0, keywords=[kw.word for kw in keywords[:5]]))
    return sorted(topics, key=lambda t: -t.relevance)


def vocabulary_diversity(words: list[str]) -> float:
    content = [w for w in words if w not in STOP_WORDS]
    return len(set(content)) / len(content) if content else 0.0


def lexical_density(words: list[str]) -> float:
    if not words:
        return 0.0
    return sum(1 for w in words if w not in FUNCTION_WORDS) / len(words)


def abstract_concept_ratio(text: str) -> float:
    lower = text.lower()
    total = len(text.split())
    if not total:
        return 0.0
    return sum(1 for term in ABSTRACT_TERMS if term in lower) / total * 100


def sentence_statistics(text: str, config: NLPSettings | None = None) -> tuple[float, float, str]:
    """Mean and standard deviation of sentence length, plus the variety bucket."""
    config = config or settings.nlp
    sentences = [s for s in _SENTENCE_END.split(text) if s.strip()]
    if not sentences:
        return 0.0, 0.0, "low"
    lengths = [len(s.split()) for s in sentences]
    mean = sum(lengths) / len(lengths)
    stddev = math.sqrt(sum((n - mean) ** 2 for n in lengths) / len(lengths))
    if stddev < config.variety_low_stddev:
        variety = "low"
    elif stddev > config.variety_high_stddev:
        variety = "high"
    else:
        variety = "medium"
    return mean, stddev, variety


def flesch_reading_ease(text: str) -> float | None:
    """Flesch reading ease via textstat; None for empty text."""
    if not text.strip():
        return None
    try:
        return float(textstat.flesch_reading_ease(text))
    except (ValueError, ZeroDivisionError) as exc:
        logger.debug("Readability calculation failed: %s", exc)
        return None


def passive_voice_percentage(text: str) -> int:
    """Share of sentences with a 'be' verb followed by a past participle."""
    sentences = [s for s in _SENTENCE_END.split(text) if s.strip()]
    if not sentences:
        return 0
    passive = sum(1 for s in sentences if _PASSIVE.search(s))
    return round(passive / len(sentences) * 100)


def jargon_density(text: str) -> int:
    """Very long words, acronyms, -ization and -ology words per 100 words."""
    total = len(text.split())
    if not total:
        return 0
    return round(sum(len(pattern.findall(text)) for pattern in _JARGON) / total * 100)


def count_transition_words(text: str) -> int:
    return len(_TRANSITION.findall(text))


def information_ratio(text: str) -> int:
    """Numbers, capitalized words and long words per 100 words."""
    total = len(text.split())
    if not total:
        return 0
    return round(sum(len(pattern.findall(text)) for pattern in _INFORMATION) / total * 100)


def classify_sentence_complexity(average_length: float) -> str:
    if average_length <= 15:
        return "simple"
    if average_length <= 25:
        return "moderate"
    return "complex"


def ai_readability_score(
    *,
    readability: float | None,
    passive_voice: int,
    jargon: int,
    sentence_complexity: str,
    information: int,
    has_clear_structure: bool,
    transition_words: int,
    word_count: int,
) -> int:
    """0-100 estimate of how easily a language model can parse the text.

    Readability is worth up to 30 points, active voice 20, low jargon 15,
    simple sentences 15, balanced information density 10, clear structure 10
    and transition usage 10.
    """
    score = min(30.0, max(readability or 0.0, 0.0) * 0.3)

    if passive_voice < 10:
        score += 20
    elif passive_voice < 20:
        score += 15
    elif passive_voice < 30:
        score += 10
    else:
        score += 5

    if jargon < 5:
        score += 15
    elif jargon < 10:
        score += 10
    elif jargon < 15:
        score += 5

    score += {"simple": 15, "moderate": 10}.get(sentence_complexity, 5)

    if 5 <= information <= 15:
        score += 10
    elif information > 0:
        score += 5

    if has_clear_structure:
        score += 10

    ratio = transition_words / word_count * 100 if word_count else 0.0
    if 1 <= ratio <= 3:
        score += 10
    elif ratio > 0:
        score += 5

    return min(100, round(score))


def is_clearly_structured(soup: BeautifulSoup) -> bool:
    """Headings, at least one list and more than three paragraphs."""
    return (
        soup.find(["h1", "h2", "h3", "h4", "h5", "h6"]) is not None
        and soup.find(["ul", "ol"]) is not None
        and len(soup.find_all("p")) > 3
    )


def analyze_sentiment(words: list[str], config: NLPSettings | None = None) -> tuple[float, str]:
    config = config or settings.nlp
    positive = sum(1 for w in words if w in POSITIVE_WORDS)
    negative = sum(1 for w in words if w in NEGATIVE_WORDS)
    total = positive + negative
    score = (positive - negative) / total if total else 0.0
    if score > config.sentiment_threshold:
        return score, "positive"
    if score < -config.sentiment_threshold:
        return score, "negative"
    return score, "neutral"


def analyze_tone(text: str) -> dict[str, float]:
    """Occurrences of tone markers per 1,000 words, capped at 100."""
    lower = text.lower()
    total = len(text.split())
    tone = {}
    for name, terms in TONE_TERMS.items():
        count = sum(len(re.findall(rf"\b{re.escape(term)}\b", lower)) for term in terms)
        tone[name] = min(count / total * 1000, 100.0) if total else 0.0
    return tone


def extract_entities(text: str, limit: int = 5) -> Entities:
    """Capitalized word runs that do not start a sentence or a line."""
    found: list[str] = []
    locations: list[str] = []
    for match in _ENTITY.finditer(text):
        prefix = text[:match.start()].rstrip(" \t")
        if not prefix or prefix[-1] in ".!?\n\"'“":
            continue
        entity = match.group()
        if entity in found:
            continue
        found.append(entity)
        if prefix.endswith((" in", " from", " at")) and " " not in entity:
            locations.append(entity)

    people = [e for e in found if len(e.split()) == 2 and not any(m in e for m in ORGANIZATION_MARKERS)]
    organizations = [e for e in found if any(m in e for m in ORGANIZATION_MARKERS) or len(e) > 15]
    products = [e for e in found if len(e.split()) <= 2 and len(e) < 20 and e not in people and e not in locations]
    lower = text.lower()
    return Entities(
        people=people[:limit],
        organizations=organizations[:limit],
        locations=locations[:limit],
        products=products[:limit],
        concepts=[term for term in ABSTRACT_TERMS if term in lower][:limit],
    )


def classify_content_type(text: str) -> tuple[str, list[str]]:
    lower = text.lower()
    scores = {name: sum(1 for s in signals if s in lower) for name, signals in CONTENT_TYPE_SIGNALS.items()}
    best = max(scores.values())
    dominant = [name for name, score in scores.items() if score == best and score > 0]
    if len(dominant) > 1:
        content_type = "mixed"
    elif dominant:
        content_type = dominant[0]
    else:
        content_type = "informational"
    intents = [CONTENT_INTENTS[name] for name, score in scores.items() if score > 0]
    return content_type, intents


def _target_audience(abstract_ratio: float, lex_density: float, vocab: float) -> str:
    if abstract_ratio > 3:
        return "academic"
    if lex_density > 0.6:
        return "technical"
    if vocab > 0.5:
        return "professional"
    return "general"


def analyze_content(
    text: str,
    html: str = "",
    config: NLPSettings | None = None,
    *,
    structured: bool | None = None,
) -> ContentAnalysis:
    """Run the full heuristic analysis.

    Args:
        text: Visible page text. When empty, text is extracted from ``html``.
        html: Optional page markup
        config: NLP thresholds (defaults to global settings)
        structured: Whether the page has headings, lists and several
            paragraphs. Derived from ``html`` when omitted; False for plain text.
    """
    config = config or settings.nlp
    soup = BeautifulSoup(html, "lxml") if html else None
    if not text and soup is not None:
        text = soup.get_text("\n")
    if structured is None:
        structured = soup is not None and is_clearly_structured(soup)

    words = tokenize(text, config.min_token_length)
    total_words = len(words)

    ranked = extract_keywords(words, config.primary_keyword_count + config.secondary_keyword_count)
    primary = ranked[:config.primary_keyword_count]
    secondary = ranked[config.primary_keyword_count:]
    keyword_density = sum(kw.density for kw in primary)
    stuffing = detect_keyword_stuffing(primary, config)
    distribution = analyze_keyword_distribution(text, [kw.word for kw in primary])

    topics = cluster_topics(primary)
    main_topic = topics[0].topic
    subtopics = [t.topic for t in topics[1:4]]
    cohesion = min(topics[0].relevance * 1.5, 100.0)
    diversity = min(len(topics) * 25, 100.0)

    vocab = vocabulary_diversity(words)
    lex = lexical_density(words)
    abstract_ratio = abstract_concept_ratio(text)
    richness = round((vocab + lex) * 50)

    mean_length, stddev, variety = sentence_statistics(text, config)
    complexity = min(mean_length * 3, 100.0)

    uniqueness = round((vocab * 0.6 + richness * 0.004) * 100)
    originality = min(uniqueness + vocab * 20, 100.0)
    if originality > 70:
        duplicate_risk = "low"
    elif originality > 50:
        duplicate_risk = "medium"
    else:
        duplicate_risk = "high"

    ai_comprehension = round((lex * 0.3 + vocab * 0.3 + (complexity / 100) * 0.2 + cohesion * 0.002) * 100)
    content_type, intents = classify_content_type(text)
    audience = _target_audience(abstract_ratio, lex, vocab)
    sentiment_score, sentiment_label = analyze_sentiment(words, config)
    entities = extract_entities(text, config.max_entities_per_type)

    readability = flesch_reading_ease(text)
    passive = passive_voice_percentage(text)
    jargon = jargon_density(text)
    transitions = count_transition_words(text)
    sentence_complexity = classify_sentence_complexity(mean_length)
    ai_readability = ai_readability_score(
        readability=readability,
        passive_voice=passive,
        jargon=jargon,
        sentence_complexity=sentence_complexity,
        information=information_ratio(text),
        has_clear_structure=structured,
        transition_words=transitions,
        word_count=len(text.split()),
    )

    analysis = ContentAnalysis(
        word_count=total_words,
        content_uniqueness_score=uniqueness,
        estimated_originality=originality,
        duplicate_content_risk=duplicate_risk,
        primary_keywords=primary,
        secondary_keywords=secondary,
        keyword_density=keyword_density,
        keyword_stuffing_risk=stuffing,
        keyword_distribution=distribution,
        detected_topics=topics,
        topic_cohesion=cohesion,
        topic_diversity=diversity,
        main_topic=main_topic,
        subtopics=subtopics,
        semantic_richness=richness,
        vocabulary_diversity=vocab,
        lexical_density=lex,
        abstract_concept_ratio=abstract_ratio,
        average_sentence_length=mean_length,
        sentence_length_stddev=stddev,
        sentence_length_variety=variety,
        sentence_complexity_score=complexity,
        ai_comprehension_score=ai_comprehension,
        structural_clarity=85 if total_words > 500 else 70,
        information_density=min(lex * 150, 100.0),
        contextual_coherence=min(cohesion + diversity / 2, 100.0),
        readability_score=readability,
        passive_voice_percentage=passive,
        jargon_density=jargon,
        transition_words=transitions,
        sentence_complexity=sentence_complexity,
        has_clear_structure=structured,
        ai_readability_score=ai_readability,
        content_type=content_type,
        content_intent=intents,
        target_audience=audience,
        sentiment_score=sentiment_score,
        sentiment_label=sentiment_label,
        tone=analyze_tone(text),
        entities=entities,
    )
    _collect_findings(analysis, config)
    return analysis


def readability_findings(analysis: ContentAnalysis, config: NLPSettings | None = None) -> list[tuple[str, str, bool]]:
    """AI readability findings as (signal, message, passed) triples.

    Shared by the analyzer's issue/strength lists and the Content Quality
    scorer's findings.
    """
    config = config or settings.nlp
    findings: list[tuple[str, str, bool]] = []
    if not analysis.word_count:
        return findings

    score = analysis.ai_readability_score
    if score >= config.ai_readability_good:
        findings.append(("ai_readability", "Excellent AI readability - clear, well-structured content", True))
    elif score < config.ai_readability_poor:
        findings.append((
            "ai_readability", f"Poor AI readability ({score}/100) - simplify structure and reduce complexity", False,
        ))

    passive = analysis.passive_voice_percentage
    if passive > config.passive_voice_high:
        findings.append((
            "passive_voice", f"High passive voice usage ({passive}%) - use active voice for clarity", False,
        ))
    elif passive < config.passive_voice_low:
        findings.append(("passive_voice", "Excellent active voice usage", True))

    if analysis.jargon_density > config.jargon_high:
        findings.append((
            "jargon", f"High jargon density ({analysis.jargon_density}%) - may confuse AI and readers", False,
        ))

    if analysis.transition_words < config.transition_min_count and analysis.word_count > config.transition_min_words:
        findings.append(("transitions", "Few transition words - improve logical flow between ideas", False))
    return findings


def _collect_findings(analysis: ContentAnalysis, config: NLPSettings) -> None:
    issues = analysis.issues
    strengths = analysis.strengths

    if analysis.keyword_stuffing_risk == "high":
        top = analysis.primary_keywords[0]
        issues.append(
            f"Keyword stuffing detected. Primary keyword density is {top.density:.2f}%. Keep it under "
            f"{config.stuffing_low_density:g}%."
        )
    elif analysis.keyword_stuffing_risk == "none" and analysis.primary_keywords:
        strengths.append("Natural keyword usage without stuffing")

    if analysis.keyword_distribution == "over-optimized":
        issues.append("Keywords appear unevenly distributed. Distribute keywords naturally throughout content.")
    elif analysis.keyword_distribution == "natural" and analysis.primary_keywords:
        strengths.append("Keywords naturally distributed across content")

    vocab_pct = analysis.vocabulary_diversity * 100
    if analysis.vocabulary_diversity < 0.3:
        issues.append(f"Low vocabulary diversity ({vocab_pct:.1f}%). Use more varied terminology.")
    elif analysis.vocabulary_diversity > 0.5:
        strengths.append(f"High vocabulary diversity ({vocab_pct:.1f}%) - rich language")

    if analysis.semantic_richness < 40:
        issues.append("Content lacks semantic richness. Add more descriptive and contextual terms.")
    elif analysis.semantic_richness > 70:
        strengths.append("High semantic richness - content is detailed and contextual")

    if analysis.topic_cohesion < 50:
        issues.append("Low topic cohesion. Focus content more clearly on main topic.")
    else:
        strengths.append("Strong topic cohesion - content stays focused")

    if analysis.content_uniqueness_score < 50:
        issues.append("Content appears generic. Add unique insights, data, or perspectives.")
    elif analysis.content_uniqueness_score > 75:
        strengths.append("High content uniqueness score - original and distinctive")

    if analysis.ai_comprehension_score < 60:
        issues.append("Content may be difficult for AI to comprehend. Improve structure and clarity.")
    elif analysis.ai_comprehension_score > 80:
        strengths.append("Excellent AI comprehension score - highly parseable content")

    for _, message, passed in readability_findings(analysis, config):
        (strengths if passed else issues).append(message)

    gaps = analysis.content_gaps
    if analysis.word_count < config.gap_min_words:
        gaps.append("Short content. Consider expanding to 1000+ words for better AI citation potential.")
    if not analysis.entities.people and not analysis.entities.organizations:
        gaps.append("No named entities detected. Add references to experts, organizations, or specific sources.")
    if len(analysis.primary_keywords) < config.gap_min_keywords:
        gaps.append("Limited keyword coverage. Expand content to cover more related terms.")

    suggestions = analysis.improvement_suggestions
    if analysis.vocabulary_diversity < 0.4:
        suggestions.append("Use synonyms and varied terminology to increase vocabulary richness")
    if analysis.sentence_length_variety == "low":
        suggestions.append("Vary sentence length for better readability and engagement")
    if analysis.topic_diversity < 50:
        suggestions.append("Cover related subtopics to demonstrate comprehensive expertise")
    if analysis.abstract_concept_ratio < 0.5 and analysis.target_audience != "general":
        suggestions.append("Add conceptual frameworks or theoretical perspectives to increase depth")
