"""Company archetype classification used to steer prompt content."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

PRODUCT_BASED = "Product-based"
SERVICE_BASED = "Service-based"
STARTUP = "Startup"

DEFAULT_ARCHETYPE = PRODUCT_BASED


class CompanyClassifier(Protocol):
    def classify(self, company: str, description: str) -> str: ...


@dataclass
class ArchetypeRule:
    """Matches when any company keyword occurs in the company name or any
    description keyword occurs in the job description (case-insensitive)."""

    archetype: str
    company_keywords: list[str] = field(default_factory=list)
    description_keywords: list[str] = field(default_factory=list)

    def matches(self, company: str, description: str) -> bool:
        company_lower = company.lower()
        description_lower = description.lower()
        return any(k.lower() in company_lower for k in self.company_keywords) or any(
            k.lower() in description_lower for k in self.description_keywords
        )


DEFAULT_RULES: list[ArchetypeRule] = [
    ArchetypeRule(
        PRODUCT_BASED,
        company_keywords=[
            "google", "microsoft", "apple", "amazon", "meta",
            "facebook", "netflix", "uber", "airbnb",
        ],
        description_keywords=["product development", "product team"],
    ),
    ArchetypeRule(
        SERVICE_BASED,
        company_keywords=["tcs", "infosys", "wipro", "accenture", "cognizant", "capgemini"],
        description_keywords=["client", "consulting", "outsourcing"],
    ),
    ArchetypeRule(
        STARTUP,
        description_keywords=[
            "startup", "fast-paced", "early stage", "seed", "series a", "series b",
        ],
    ),
]


class KeywordClassifier:
    """First matching rule wins; falls back to *default*."""

    def __init__(
        self,
        rules: list[ArchetypeRule] | None = None,
        default: str = DEFAULT_ARCHETYPE,
    ) -> None:
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self.default = default

    def classify(self, company: str, description: str) -> str:
        for rule in self.rules:
            if rule.matches(company or "", description or ""):
                return rule.archetype
        return self.default

    def with_rules(self, extra: list[ArchetypeRule]) -> KeywordClassifier:
        """Return a classifier that checks *extra* before the current rules."""
        return KeywordClassifier(list(extra) + self.rules, self.default)


def rules_from_config(raw: list[dict[str, Any]]) -> list[ArchetypeRule]:
    """Build rules from the ``companies:`` section of config.yaml."""
    rules: list[ArchetypeRule] = []
    for item in raw or []:
        if not item.get("archetype"):
            raise ValueError(f"Company rule is missing an archetype: {item!r}")
        rules.append(
            ArchetypeRule(
                archetype=item["archetype"],
                company_keywords=list(item.get("companies") or []),
                description_keywords=list(item.get("keywords") or []),
            )
        )
    return rules


_GUIDELINES = {
    PRODUCT_BASED: """\
- Focus on system design, scalability, and architecture questions
- Include questions about product thinking and user experience
- Emphasize coding best practices and clean code principles
- Ask about handling large-scale systems and performance optimization
- Include questions about innovation and problem-solving approaches
- Deep OOP + Design Patterns + System Design
- OOP: Advanced applications like designing systems (e.g., parking lot, movie booking), SOLID principles, IS-A vs HAS-A
- DSA: Medium-Hard levels like sliding window, dynamic programming, graphs, trees, hashing
- JD Alignment: High, with focus on stack internals, optimization, integration""",
    SERVICE_BASED: """\
- Focus on client communication and project management skills
- Include questions about working with diverse technologies and frameworks
- Emphasize adaptability and learning new technologies quickly
- Ask about handling multiple projects and time management
- Include questions about working in team environments and collaboration
- OOP: Theoretical + Simple coding, e.g., encapsulation, abstraction, method overloading/overriding, access modifiers
- DSA: Beginner-Medium like sorting, searching, linked lists, stacks/queues, string problems
- JD Alignment: Medium, with basics in languages/databases mentioned, aptitude/logical questions
- Include aptitude, puzzles, basic SQL if relevant""",
    STARTUP: """\
- Focus on adaptability and wearing multiple hats
- Include questions about working in fast-paced, uncertain environments
- Emphasize ownership, initiative, and self-direction
- Ask about building from scratch and rapid prototyping
- Include questions about growth mindset and learning agility
- OOP: Applied in real-world coding, e.g., structuring classes for products, composition vs inheritance
- DSA: Easy-Medium like array/string manipulation, hashmaps, basic recursion, sorting/filtering
- JD Alignment: Very High, with practical features, debugging, quick implementation in their stack""",
}

_GENERIC_GUIDELINES = """\
- Focus on relevant technical skills and problem-solving abilities
- Include questions about teamwork and communication
- Emphasize continuous learning and professional development
- Ask about handling challenges and deadlines"""

_CODING_FOCUS = {
    PRODUCT_BASED: """\
- System design elements, scalability problems
- Complex algorithms and optimization
- Data structures for large-scale systems
- Advanced problem-solving patterns
- Medium-Hard DSA: sliding window, DP, graphs, trees, hashing
- OOP mix: design patterns in problems""",
    SERVICE_BASED: """\
- Standard algorithms and data structures
- Array, string, and tree problems
- Basic dynamic programming
- Practical coding scenarios
- Easy-Medium DSA: sorting, searching, linked lists, stacks, queues
- OOP basics in coding""",
}

_DEFAULT_CODING_FOCUS = """\
- Fast problem-solving skills
- Versatile coding abilities
- Efficient algorithms
- Real-world application problems
- Easy-Medium DSA: arrays/strings, hashmaps, recursion, sorting
- Applied OOP in practical scenarios"""


def guidelines_for(archetype: str) -> str:
    return _GUIDELINES.get(archetype, _GENERIC_GUIDELINES)


def coding_focus_for(archetype: str) -> str:
    # Anything that is neither product- nor service-based gets the startup focus.
    return _CODING_FOCUS.get(archetype, _DEFAULT_CODING_FOCUS)
