"""Deterministic keyword-based analysis used when no model is available.

Provides topic detection, document-type detection, templated clause
generation and a per-line risk classifier. Output never depends on a
delegated capability and every generated clause carries a non-empty
explanation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from .models import Clause, DocumentAnalysis, Language, RiskLevel

# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------


class Topic(str, Enum):
    """Keyword categories scanned in a single pass over the document."""

    PAYMENT = "payment"
    TERMINATION = "termination"
    LIABILITY = "liability"
    RENEWAL = "renewal"
    ARBITRATION = "arbitration"
    INTELLECTUAL_PROPERTY = "intellectual_property"
    CONFIDENTIALITY = "confidentiality"
    WARRANTY = "warranty"
    COMPLIANCE = "compliance"
    PENALTY = "penalty"
    INSURANCE = "insurance"
    EMPLOYMENT = "employment"
    REAL_ESTATE = "real_estate"
    PURCHASE = "purchase"
    SERVICE = "service"
    LOAN = "loan"
    PARTNERSHIP = "partnership"
    DATA_PRIVACY = "data_privacy"


# Keywords match at a word start, case-insensitively.
_TOPIC_KEYWORDS: dict[Topic, str] = {
    Topic.PAYMENT: r"pay\w*|fees?\b|costs?\b|pric\w*|invoic\w*|billing",
    Topic.TERMINATION: r"terminat\w*|cancel\w*|expir\w*|ends?\b|dissolution|exit\w*",
    Topic.LIABILITY: r"liabilit\w*|liable|responsib\w*|damages?\b|loss(?:es)?\b|harm\w*|indemni\w*",
    Topic.RENEWAL: r"renew\w*|automatic\w*|extend\w*|extension|continu\w*|perpetual\w*",
    Topic.ARBITRATION: r"arbitrat\w*|disputes?\b|courts?\b|litigation|mediat\w*",
    Topic.INTELLECTUAL_PROPERTY: r"intellectual|copyrights?\b|trademarks?\b|patents?\b|proprietary",
    Topic.CONFIDENTIALITY: r"confidential\w*|non-disclosure|secrets?\b|private",
    Topic.WARRANTY: r"warrant\w*|guarantee\w*|representations?\b|promis\w*",
    Topic.COMPLIANCE: r"compl(?:y|ies|ied|ying|iance|iant)\b|regulat\w*|standards?\b|requirements?\b",
    Topic.PENALTY: r"penalt\w*|fines?\b|breach\w*|default\w*|violat\w*",
    Topic.INSURANCE: r"insur\w*|coverage|polic(?:y|ies)\b|claims?\b",
    Topic.EMPLOYMENT: r"employ\w*|work\w*|salar(?:y|ies)\b|benefits?\b|vacation",
    Topic.REAL_ESTATE: r"propert(?:y|ies)\b|leases?\b|lessee|lessor|rent\w*|premises|landlord|tenan\w*",
    Topic.PURCHASE: r"purchas\w*|buy\w*|sales?\b|goods\b|products?\b",
    Topic.SERVICE: r"servic\w*|perform\w*|deliver\w*|provid\w*",
    Topic.LOAN: r"loans?\b|credit\w*|debt\w*|interest\b|mortgag\w*|borrow\w*|lend\w*",
    Topic.PARTNERSHIP: r"partner\w*|joint\b|collaborat\w*|ventures?\b",
    Topic.DATA_PRIVACY: r"data\b|information\b|personal\b|privacy|gdpr",
}

_TOPIC_PATTERNS: dict[Topic, re.Pattern] = {
    topic: re.compile(rf"\b(?:{pattern})", re.IGNORECASE)
    for topic, pattern in _TOPIC_KEYWORDS.items()
}


def detect_topics(text: str) -> set[Topic]:
    """Return every topic whose keywords appear in ``text``."""
    return {topic for topic, pattern in _TOPIC_PATTERNS.items() if pattern.search(text)}


# ---------------------------------------------------------------------------
# Document types
# ---------------------------------------------------------------------------


class DocumentType(str, Enum):
    EMPLOYMENT = "employment"
    REAL_ESTATE = "real_estate"
    LOAN = "loan"
    PURCHASE = "purchase"
    PARTNERSHIP = "partnership"
    SERVICE = "service"
    GENERAL = "general"


# First match wins. Multi-domain documents resolve to the earliest type.
_TYPE_PRIORITY: list[tuple[Topic, DocumentType]] = [
    (Topic.EMPLOYMENT, DocumentType.EMPLOYMENT),
    (Topic.REAL_ESTATE, DocumentType.REAL_ESTATE),
    (Topic.LOAN, DocumentType.LOAN),
    (Topic.PURCHASE, DocumentType.PURCHASE),
    (Topic.PARTNERSHIP, DocumentType.PARTNERSHIP),
    (Topic.SERVICE, DocumentType.SERVICE),
]


def detect_document_type(topics: set[Topic]) -> DocumentType:
    for topic, doc_type in _TYPE_PRIORITY:
        if topic in topics:
            return doc_type
    return DocumentType.GENERAL


@dataclass(frozen=True)
class FillerClause:
    title: str
    risk: RiskLevel


@dataclass(frozen=True)
class DocumentTemplate:
    """Introductory clause text and filler clauses for one document type."""

    title: str
    simple: str
    why: str
    fillers: list[FillerClause] = field(default_factory=list)


DOCUMENT_TEMPLATES: dict[DocumentType, DocumentTemplate] = {
    DocumentType.EMPLOYMENT: DocumentTemplate(
        title="Employment Agreement Overview",
        simple=(
            "This document establishes the working relationship between you and your "
            "employer, including your job duties, compensation, and workplace rules."
        ),
        why=(
            "Understanding your employment terms protects your career interests and helps "
            "you know your rights and obligations as an employee."
        ),
        fillers=[
            FillerClause("Job Duties and Performance Expectations", RiskLevel.LOW),
            FillerClause("Benefits and Compensation Details", RiskLevel.MEDIUM),
            FillerClause("Workplace Policies and Procedures", RiskLevel.LOW),
        ],
    ),
    DocumentType.REAL_ESTATE: DocumentTemplate(
        title="Property Agreement Structure",
        simple=(
            "This agreement covers the property transaction, including rights, "
            "responsibilities, and conditions for the property involved."
        ),
        why=(
            "Property agreements involve significant money and legal obligations, so "
            "understanding these terms protects your investment and rights."
        ),
        fillers=[
            FillerClause("Property Condition and Inspection Rights", RiskLevel.MEDIUM),
            FillerClause("Maintenance and Repair Responsibilities", RiskLevel.MEDIUM),
            FillerClause("Utilities and Additional Costs", RiskLevel.LOW),
        ],
    ),
    DocumentType.LOAN: DocumentTemplate(
        title="Loan Agreement Framework",
        simple=(
            "This document outlines the terms of borrowing money, including repayment "
            "schedule, interest rates, and consequences of non-payment."
        ),
        why=(
            "Loan terms directly affect your financial future and credit, so knowing these "
            "details helps you avoid costly mistakes and default."
        ),
        fillers=[
            FillerClause("Interest Rates and Payment Schedule", RiskLevel.HIGH),
            FillerClause("Collateral and Security Requirements", RiskLevel.HIGH),
            FillerClause("Default and Acceleration Clauses", RiskLevel.HIGH),
        ],
    ),
    DocumentType.PURCHASE: DocumentTemplate(
        title="Purchase Agreement Details",
        simple=(
            "This agreement details what you're buying, the price, delivery terms, and "
            "what happens if there are problems with the purchase."
        ),
        why=(
            "Purchase agreements protect you from fraud and ensure you get what you paid "
            "for, while clarifying your recourse if problems arise."
        ),
        fillers=[
            FillerClause("Delivery and Acceptance Terms", RiskLevel.MEDIUM),
            FillerClause("Returns and Refunds", RiskLevel.MEDIUM),
            FillerClause("Title and Risk of Loss", RiskLevel.LOW),
        ],
    ),
    DocumentType.PARTNERSHIP: DocumentTemplate(
        title="Partnership Agreement Foundation",
        simple=(
            "This document establishes how the business partnership will operate, "
            "including roles, profit sharing, and decision-making processes."
        ),
        why=(
            "Partnership terms affect your business control, profits, and personal "
            "liability, making it crucial to understand your commitments."
        ),
        fillers=[
            FillerClause("Capital Contributions", RiskLevel.MEDIUM),
            FillerClause("Profit and Loss Sharing", RiskLevel.MEDIUM),
            FillerClause("Decision-Making and Voting", RiskLevel.LOW),
        ],
    ),
    DocumentType.SERVICE: DocumentTemplate(
        title="Service Agreement Introduction",
        simple=(
            "This agreement explains what services will be provided, how much they cost, "
            "and the standards expected from both parties."
        ),
        why=(
            "Service agreements set expectations and protect both parties, helping avoid "
            "disputes and ensuring you get the value you're paying for."
        ),
        fillers=[
            FillerClause("Scope of Services", RiskLevel.LOW),
            FillerClause("Service Levels and Standards", RiskLevel.MEDIUM),
            FillerClause("Change Requests and Variations", RiskLevel.LOW),
        ],
    ),
    DocumentType.GENERAL: DocumentTemplate(
        title="Document Structure and Organization",
        simple=(
            "This document establishes the basic framework and definitions for the legal "
            "agreement between the parties."
        ),
        why=(
            "Understanding the document structure helps you navigate the contract "
            "effectively and know where to find important information."
        ),
        fillers=[
            FillerClause("General Terms and Conditions", RiskLevel.LOW),
            FillerClause("Miscellaneous Provisions", RiskLevel.LOW),
            FillerClause("Signatures and Execution", RiskLevel.LOW),
        ],
    ),
}


# ---------------------------------------------------------------------------
# Clause templates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClauseTemplate:
    """Clause text for one topic.

    ``variants`` adds a document-type-specific sentence to ``simple``;
    ``default_variant`` is used for types without their own sentence.
    """

    title: str
    simple: str
    why: str
    risk: RiskLevel
    variants: dict[DocumentType, str] = field(default_factory=dict)
    default_variant: str = ""

    def simple_for(self, doc_type: DocumentType) -> str:
        extra = self.variants.get(doc_type, self.default_variant)
        return f"{self.simple} {extra}".strip()


CLAUSE_TEMPLATES: dict[Topic, ClauseTemplate] = {
    Topic.PAYMENT: ClauseTemplate(
        title="Payment and Financial Terms",
        simple=(
            "This section covers how much you need to pay, when payments are due, and "
            "what happens if you're late."
        ),
        why=(
            "Payment terms directly impact your budget and financial planning. Late payment "
            "penalties can be expensive, and understanding these terms helps you avoid "
            "unnecessary costs."
        ),
        risk=RiskLevel.MEDIUM,
        variants={
            DocumentType.LOAN: "Interest rates and repayment schedules are crucial here.",
            DocumentType.EMPLOYMENT: "This includes your salary, benefits, and payment schedule.",
        },
        default_variant="Understanding payment terms helps you budget and avoid penalties.",
    ),
    Topic.TERMINATION: ClauseTemplate(
        title="Termination and Exit Procedures",
        simple=(
            "This explains how the relationship can end, what notice is required, and any "
            "penalties for early termination."
        ),
        why=(
            "Knowing your exit options is crucial for maintaining flexibility and avoiding "
            "being locked into unfavorable terms longer than necessary."
        ),
        risk=RiskLevel.MEDIUM,
        variants={
            DocumentType.EMPLOYMENT: "This covers how you can quit or be fired.",
            DocumentType.REAL_ESTATE: "This covers lease termination and move-out procedures.",
        },
        default_variant="This covers how to properly end the agreement.",
    ),
    Topic.LIABILITY: ClauseTemplate(
        title="Liability and Risk Allocation",
        simple=(
            "This determines who pays when things go wrong, including accidents, damages, "
            "or legal issues."
        ),
        why=(
            "Liability clauses can expose you to significant financial risk or limit your "
            "ability to recover losses. These provisions can cost thousands if you don't "
            "understand them."
        ),
        risk=RiskLevel.HIGH,
        variants={
            DocumentType.EMPLOYMENT: "This might cover workplace injuries or professional errors.",
            DocumentType.REAL_ESTATE: "This covers property damage and injury liability.",
        },
        default_variant="This affects who is responsible for various types of problems.",
    ),
    Topic.ARBITRATION: ClauseTemplate(
        title="Dispute Resolution and Legal Rights",
        simple=(
            "This controls how disagreements are resolved, potentially requiring "
            "arbitration instead of court proceedings. You might be limited in where and "
            "how you can pursue legal claims."
        ),
        why=(
            "Arbitration clauses can significantly limit your legal rights and make it more "
            "expensive and difficult to pursue legitimate complaints or seek compensation."
        ),
        risk=RiskLevel.HIGH,
    ),
    Topic.RENEWAL: ClauseTemplate(
        title="Renewal and Continuation Terms",
        simple=(
            "This covers whether the agreement automatically continues and what you need "
            "to do to prevent unwanted renewals."
        ),
        why=(
            "Auto-renewal clauses can trap you in agreements longer than intended, "
            "potentially at different rates or terms that may not be favorable."
        ),
        risk=RiskLevel.MEDIUM,
        variants={DocumentType.REAL_ESTATE: "This might involve automatic lease renewals."},
        default_variant="This could lock you into continued obligations.",
    ),
    Topic.INTELLECTUAL_PROPERTY: ClauseTemplate(
        title="Intellectual Property and Ownership Rights",
        simple=(
            "This determines who owns ideas, creations, or innovations developed during "
            "the relationship."
        ),
        why=(
            "IP clauses can affect your future business opportunities and ownership rights "
            "to valuable creations or innovations."
        ),
        risk=RiskLevel.MEDIUM,
        variants={
            DocumentType.EMPLOYMENT: "This often means your employer owns work you create on the job.",
        },
        default_variant="This affects ownership of any collaborative work or innovations.",
    ),
    Topic.CONFIDENTIALITY: ClauseTemplate(
        title="Confidentiality and Non-Disclosure Requirements",
        simple=(
            "This requires you to keep certain information secret and may restrict what "
            "you can discuss about the relationship or business."
        ),
        why=(
            "Confidentiality agreements can limit your ability to discuss your experience, "
            "seek advice, or use knowledge gained in future opportunities."
        ),
        risk=RiskLevel.MEDIUM,
    ),
    Topic.PENALTY: ClauseTemplate(
        title="Penalties and Default Consequences",
        simple=(
            "This outlines the financial and legal consequences if you fail to meet your "
            "obligations under the agreement."
        ),
        why=(
            "Penalty clauses can result in significant unexpected costs and should be "
            "understood before you commit to any agreement."
        ),
        risk=RiskLevel.HIGH,
    ),
    Topic.INSURANCE: ClauseTemplate(
        title="Insurance and Coverage Requirements",
        simple=(
            "This specifies what insurance coverage you must maintain and who is "
            "responsible for various types of claims or losses."
        ),
        why=(
            "Insurance requirements can add significant costs to your obligations and "
            "affect your financial protection in case of problems."
        ),
        risk=RiskLevel.MEDIUM,
    ),
    Topic.COMPLIANCE: ClauseTemplate(
        title="Compliance and Regulatory Requirements",
        simple=(
            "This outlines legal and regulatory standards you must follow and the "
            "consequences of non-compliance."
        ),
        why=(
            "Compliance failures can result in legal penalties, fines, or contract "
            "termination, making it important to understand these requirements."
        ),
        risk=RiskLevel.MEDIUM,
    ),
    Topic.DATA_PRIVACY: ClauseTemplate(
        title="Data Privacy and Information Handling",
        simple=(
            "This covers how personal information is collected, used, and protected, "
            "including your privacy rights and data security measures."
        ),
        why=(
            "Data privacy terms affect your personal information security and may impact "
            "your legal rights if data breaches or misuse occur."
        ),
        risk=RiskLevel.MEDIUM,
    ),
    Topic.WARRANTY: ClauseTemplate(
        title="Warranties and Quality Guarantees",
        simple=(
            "This outlines what promises are made about quality, performance, or "
            "reliability, and what recourse you have if expectations aren't met."
        ),
        why=(
            "Warranty terms determine your protection and remedies if products or services "
            "don't meet promised standards."
        ),
        risk=RiskLevel.LOW,
    ),
}

# Topics that produce clauses, in output order.
CLAUSE_TOPIC_ORDER: list[Topic] = [
    Topic.PAYMENT,
    Topic.TERMINATION,
    Topic.LIABILITY,
    Topic.ARBITRATION,
    Topic.RENEWAL,
    Topic.INTELLECTUAL_PROPERTY,
    Topic.CONFIDENTIALITY,
    Topic.PENALTY,
    Topic.INSURANCE,
    Topic.COMPLIANCE,
    Topic.DATA_PRIVACY,
    Topic.WARRANTY,
]

MIN_CLAUSES = 4


def text_window(text: str, start: int, size: int) -> str:
    """Slice ``size`` characters from ``start``, marking a cut-off tail with ``...``."""
    start = max(0, min(start, len(text) - size))
    end = min(start + size, len(text))
    return text[start:end] + ("..." if end < len(text) else "")


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class FallbackHeuristicEngine:
    """Keyword-pattern document analysis with no delegated dependencies.

    Example::

        engine = FallbackHeuristicEngine()
        analysis = engine.analyze(document_text, Language.EN)
        print(analysis.overall_risk, len(analysis.clauses))
    """

    def analyze(self, text: str, language: Language) -> DocumentAnalysis:
        topics = detect_topics(text)
        doc_type = detect_document_type(topics)
        clauses = self.generate_clauses(text, topics, doc_type)
        return DocumentAnalysis(
            summary=self.summarize(clauses),
            clauses=clauses,
            language=language,
        )

    def generate_clauses(
        self, text: str, topics: set[Topic], doc_type: DocumentType
    ) -> list[Clause]:
        template = DOCUMENT_TEMPLATES[doc_type]
        clauses = [
            Clause(
                id="c1",
                title=template.title,
                original=text_window(text, 0, 200),
                simple=template.simple,
                why=template.why,
                risk=RiskLevel.LOW,
            )
        ]

        detected = [topic for topic in CLAUSE_TOPIC_ORDER if topic in topics]
        for index, topic in enumerate(detected):
            clause_template = CLAUSE_TEMPLATES[topic]
            risk = clause_template.risk
            if topic == Topic.TERMINATION and Topic.PENALTY in topics:
                risk = RiskLevel.HIGH
            clauses.append(
                Clause(
                    id=f"c{len(clauses) + 1}",
                    title=clause_template.title,
                    original=text_window(text, (index + 1) * 200, 200),
                    simple=clause_template.simple_for(doc_type),
                    why=clause_template.why,
                    risk=risk,
                )
            )

        for index, filler in enumerate(template.fillers):
            if len(clauses) >= MIN_CLAUSES:
                break
            clauses.append(
                Clause(
                    id=f"c{len(clauses) + 1}",
                    title=filler.title,
                    original=text_window(text, (index + 3) * 150, 150),
                    simple=(
                        f"This section covers {filler.title.lower()}, which is important for "
                        "understanding your obligations and rights."
                    ),
                    why=(
                        "Understanding these terms helps ensure you comply with all "
                        "requirements and know what to expect."
                    ),
                    risk=filler.risk,
                )
            )
        return clauses

    @staticmethod
    def summarize(clauses: list[Clause]) -> str:
        counts = {level: sum(1 for c in clauses if c.risk == level) for level in RiskLevel}
        plural = "" if len(clauses) == 1 else "s"
        if counts[RiskLevel.HIGH]:
            detail = (
                f"There are {counts[RiskLevel.HIGH]} high-risk areas requiring careful "
                "attention, particularly around liability and penalties."
            )
        elif counts[RiskLevel.MEDIUM]:
            detail = (
                f"There are {counts[RiskLevel.MEDIUM]} medium-risk areas to review, mainly "
                "concerning payments and renewals."
            )
        else:
            detail = "The document appears to have standard terms with low overall risk."
        return (
            f"This document has been analyzed and contains {len(clauses)} key section{plural}. "
            f"{detail} Please review each section carefully and consider seeking professional "
            "legal advice for important decisions."
        )


# ---------------------------------------------------------------------------
# Segment classifier
# ---------------------------------------------------------------------------

_HIGH_SEGMENT_RE = re.compile(
    r"\b(?:penalt\w*|liabilit\w*|liable|indemni\w*|auto-?renew\w*|"
    r"automatic(?:ally)?\s+renew\w*|arbitrat\w*|termination\s+fees?|"
    r"early\s+termination|liquidated\s+damages)",
    re.IGNORECASE,
)
_MEDIUM_SEGMENT_RE = re.compile(
    r"\b(?:pay\w*|invoic\w*|interest\b|late\s+fees?|notice\b|renew\w*|"
    r"jurisdiction|governing\s+law)",
    re.IGNORECASE,
)

SEGMENT_EXPLANATIONS: dict[RiskLevel, str] = {
    RiskLevel.HIGH: (
        "This line mentions penalties, liability, lock-in or arbitration that could cost "
        "you money or limit your options."
    ),
    RiskLevel.MEDIUM: "This line sets payment, notice, renewal or jurisdiction terms to keep track of.",
    RiskLevel.LOW: "Standard legal text such as a definition, heading or boilerplate.",
}


def classify_segment(text: str) -> tuple[RiskLevel, str]:
    """Classify one line of contract text with the fixed risk heuristic."""
    if _HIGH_SEGMENT_RE.search(text):
        level = RiskLevel.HIGH
    elif _MEDIUM_SEGMENT_RE.search(text):
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW
    return level, SEGMENT_EXPLANATIONS[level]
