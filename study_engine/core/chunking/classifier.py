"""
STEM content classifier.

Scores a document for mathematical and scientific content using
density-based heuristics, deciding whether the math-aware chunker
should be used.

Dependencies: re (stdlib), pydantic
System role: Chunker selection for ingestion
"""

import re

from pydantic import BaseModel, Field

SAMPLE_SIZE = 50_000
MIN_TEXT_LENGTH = 100
STEM_THRESHOLD = 40

# Tier 1: unambiguous LaTeX markers
STRONG_LATEX_PATTERNS = {
    "LaTeX display math": re.compile(r"\$\$[\s\S]{5,}?\$\$"),
    "LaTeX equation env": re.compile(r"\\begin\{(?:equation|align|gather|eqnarray)\*?\}", re.I),
    "LaTeX math operators": re.compile(r"\\(?:frac|sqrt|sum|int|prod|lim|partial)\{"),
    "LaTeX matrix": re.compile(r"\\begin\{(?:matrix|bmatrix|pmatrix|vmatrix)\}", re.I),
}

MATH_SYMBOL_PATTERN = re.compile(
    "[\u2211\u222b\u220f\u2202\u2207\u2206\u221a\u221b\u221c\u221e\u221d\u2248\u2260\u2261"
    "\u2264\u2265\u00b1\u00d7\u00f7\u00b7\u2200\u2203\u2208\u2209\u2282\u2283\u2286\u2287"
    "\u222a\u2229\u2205\u2192\u2190\u2194\u21d2\u21d0\u21d4\u21a6\u2227\u2228\u00ac\u2295"
    "\u2297\u2115\u2124\u211a\u211d\u2102\u2119]"
)
GREEK_PATTERN = re.compile("[\u03b3-\u03be\u03c0\u03c1\u03c3-\u03c9\u0393\u0394\u0398\u039b\u039e\u03a0\u03a3\u03a6\u03a8\u03a9]")

FUNCTION_NOTATION = re.compile(r"\b[fghFGH]\s*\(\s*[a-zA-Z]\s*\)")
SUBSCRIPT_NOTATION = re.compile(r"\b[a-zA-Z]_\{?[0-9ijn]\}?")
EXPONENT_NOTATION = re.compile(r"\b[a-zA-Z]\^\{?[\-0-9a-z]+\}?")

HARD_STEM_TERMS = re.compile(
    r"\b(?:eigenvalue|eigenvector|determinant|Jacobian|Hessian|Laplacian|Hamiltonian|polynomial|"
    r"differential|logarithm|exponential|asymptotic|convergence|divergence|homeomorphism|"
    r"isomorphism|bijection|surjection|injection|cardinality|countable|uncountable|topology|"
    r"manifold|Hilbert|Banach|Lebesgue|Fourier|Laplace|Riemannian|Euclidean|Cartesian|"
    r"orthogonal|orthonormal|diagonalizable)\b",
    re.I,
)
SCIENCE_TERMS = re.compile(
    r"\b(?:quantum|photon|electron|proton|neutron|molecule|polymer|catalyst|thermodynamic|"
    r"entropy|enthalpy|kinetics|electromagnetic|semiconductor|transistor|algorithm|complexity|"
    r"optimization|iteration|recursion|convergence|numerical|computational|simulation|"
    r"stochastic|probabilistic|Gaussian|Poisson|Bayesian|regression|correlation|variance|"
    r"covariance|eigenmode|wavefunction|Schr\u00f6dinger|Maxwell|Boltzmann)\b",
    re.I,
)
THEOREM_STRUCTURE = re.compile(r"\b(?:Theorem|Lemma|Corollary|Proposition)\s+\d+(?:\.\d+)*", re.I)
DEFINITION_STRUCTURE = re.compile(r"\bDefinition\s+\d+(?:\.\d+)*\s*[.:]", re.I)

ARCHITECTURE_TERMS = re.compile(
    r"\b(?:architect|architecture|building|facade|floor\s*plan|elevation|blueprint|construction|"
    r"aesthetic|design\s*principle|urban|landscape|interior|renovation|preservation|modernist|"
    r"postmodern|gothic|baroque|renaissance|neoclassical|brutalist|contemporary|residential|"
    r"commercial|zoning|setback|footprint|cantilever|fenestration)\b",
    re.I,
)
HUMANITIES_TERMS = re.compile(
    r"\b(?:narrative|protagonist|metaphor|allegory|symbolism|rhetoric|discourse|epistemology|"
    r"ontology|phenomenology|hermeneutic|poststructural|deconstruction|semiotics|dialectic|"
    r"aesthetic|sublime|tragic|comic|irony|satire)\b",
    re.I,
)


class StemClassification(BaseModel):
    """Result of STEM content detection."""

    is_stem: bool
    confidence: int = Field(ge=0, le=100)
    indicators: list[str] = Field(default_factory=list)


def detect_stem_content(text: str, threshold: int = STEM_THRESHOLD) -> StemClassification:
    """
    Classify a document as STEM or non-STEM.

    Only the first 50k characters are scored. Densities are measured per
    10k characters so that isolated symbols in long prose do not count.

    Args:
        text: Document text
        threshold: Minimum confidence for a STEM classification

    Returns:
        StemClassification: Decision, confidence (0-100) and matched indicators
    """
    if not text or len(text) < MIN_TEXT_LENGTH:
        return StemClassification(is_stem=False, confidence=0)

    sample_size = min(len(text), SAMPLE_SIZE)
    sample = text[:sample_size]
    indicators: list[str] = []
    score = 0

    for name, pattern in STRONG_LATEX_PATTERNS.items():
        count = len(pattern.findall(sample))
        if count >= 2:
            score += 30
            indicators.append(name)
        elif count == 1:
            score += 15

    symbol_density = len(MATH_SYMBOL_PATTERN.findall(sample)) / sample_size * 10_000
    if symbol_density > 10:
        score += 25
        indicators.append("math symbols (high density)")
    elif symbol_density > 3:
        score += 15
        indicators.append("math symbols")

    greek_density = len(GREEK_PATTERN.findall(sample)) / sample_size * 10_000
    if greek_density > 5:
        score += 20
        indicators.append("Greek letters (high density)")
    elif greek_density > 2:
        score += 10
        indicators.append("Greek letters")

    if len(FUNCTION_NOTATION.findall(sample)) >= 5:
        score += 15
        indicators.append("function notation")
    if len(SUBSCRIPT_NOTATION.findall(sample)) >= 10:
        score += 15
        indicators.append("subscript notation")
    if len(EXPONENT_NOTATION.findall(sample)) >= 10:
        score += 15
        indicators.append("exponent notation")

    hard_terms = len(HARD_STEM_TERMS.findall(sample))
    if hard_terms >= 5:
        score += 25
        indicators.append("advanced math terminology")
    elif hard_terms >= 2:
        score += 12
        indicators.append("math terminology")

    science_terms = len(SCIENCE_TERMS.findall(sample))
    if science_terms >= 5:
        score += 20
        indicators.append("science/engineering terminology")
    elif science_terms >= 2:
        score += 10

    if len(THEOREM_STRUCTURE.findall(sample)) >= 3:
        score += 15
        indicators.append("theorem structure")
    if len(DEFINITION_STRUCTURE.findall(sample)) >= 3:
        score += 12
        indicators.append("formal definitions")

    # Negative signals
    architecture_terms = len(ARCHITECTURE_TERMS.findall(sample))
    if architecture_terms >= 5:
        score -= 15
        if architecture_terms >= 15 and score < 50:
            score = min(score, 20)
    if len(HUMANITIES_TERMS.findall(sample)) >= 5:
        score -= 10

    confidence = min(100, max(0, score))
    return StemClassification(
        is_stem=confidence >= threshold,
        confidence=confidence,
        indicators=indicators,
    )
