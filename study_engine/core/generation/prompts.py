"""
Generation prompts.

Builds the structured prompt for one generation task: source content,
strict content rules, difficulty and math guidance, and a JSON format
guide for the requested item type.

Dependencies: None
System role: Prompt construction for the generation orchestrator
"""

from study_engine.core.models import Difficulty, ItemType

MULTIPLE_CHOICE_FORMAT = """Generate exactly {count} multiple-choice questions.

REQUIREMENTS FOR EACH QUESTION:
- A clear question asking about a specific fact, concept, or relationship
- EXACTLY 4 answer options labeled A, B, C, D
- Each option must be a distinct, plausible answer (no obviously wrong options)
- One and only one correct answer (A, B, C, or D)
- A brief explanation of why the correct answer is right

CRITICAL: You MUST include the "options" field as an object with keys "A", "B", "C", "D".

JSON format (follow EXACTLY):
[
  {{
    "question": "What is the primary function of mitochondria in eukaryotic cells?",
    "options": {{
      "A": "Energy production through ATP synthesis",
      "B": "Protein synthesis and folding",
      "C": "Waste removal and detoxification",
      "D": "Cell division and reproduction"
    }},
    "correct_answer": "A",
    "explanation": "Mitochondria generate most of the cell's ATP through oxidative phosphorylation.",
    "difficulty": "medium",
    "topic": "Cell Biology"
  }}
]"""

TRUE_FALSE_FORMAT = """Generate exactly {count} true/false questions.

REQUIREMENTS FOR EACH QUESTION:
- The "question" field MUST be a DECLARATIVE STATEMENT, not a question
- Do NOT include options and do NOT prefix with "True or False:"
- The statement must be clearly true or clearly false based on the source content
- Include a mix of true and false statements (roughly 50/50)
- The "correct_answer" must be exactly "true" or "false" (lowercase)
- Include an explanation of why the statement is true or false

JSON format (follow EXACTLY):
[
  {{
    "question": "Mitochondria are responsible for protein synthesis in cells.",
    "correct_answer": "false",
    "explanation": "Ribosomes synthesize proteins; mitochondria produce ATP through cellular respiration.",
    "difficulty": "medium"
  }}
]"""

SHORT_ANSWER_FORMAT = """Generate exactly {count} short-answer questions.
Each question must have:
- A clear direct question
- A model answer
- Key points a complete answer must mention

JSON format:
[
  {{
    "question": "How do mitochondria generate energy?",
    "model_answer": "Mitochondria generate energy through oxidative phosphorylation...",
    "key_points": ["oxidative phosphorylation", "ATP production", "inner membrane"],
    "difficulty": "medium"
  }}
]"""

FLASHCARD_FORMAT = """Generate exactly {count} flashcards.
Each flashcard must have:
- A front (concept, term, or question)
- A back (definition, answer, or explanation)

JSON format:
[
  {{
    "front": "Mitochondria",
    "back": "Organelle that generates most of the chemical energy needed to power the cell (ATP).",
    "topic": "Cell Biology"
  }}
]"""

FORMAT_GUIDES = {
    ItemType.MULTIPLE_CHOICE: MULTIPLE_CHOICE_FORMAT,
    ItemType.TRUE_FALSE: TRUE_FALSE_FORMAT,
    ItemType.SHORT_ANSWER: SHORT_ANSWER_FORMAT,
    ItemType.FLASHCARD: FLASHCARD_FORMAT,
}

MATH_GUIDE = """
IMPORTANT: This content contains mathematical notation.
- Use LaTeX format for all math: inline math as $...$ and display math as $$...$$
- Include calculations and formulas in questions where appropriate
- Test understanding of mathematical concepts, not just memorization"""

CONTENT_RULES = """CRITICAL RULES (VIOLATION = FAILURE):
1. QUESTIONS MUST BE STANDALONE. They must make sense to someone who has never seen the source text but knows the subject.
2. NEVER reference the text/passage/document/author in the question or answer.
   - BAD: "According to the text, what is..."
   - BAD: "The author argues that..."
   - BAD: "As mentioned in the passage..."
   - GOOD: "What is..."
   - GOOD: "Which factor contributes to..."
3. Test CONCEPTS and KNOWLEDGE, not reading comprehension.
   - BAD: "What does the second paragraph say about X?"
   - GOOD: "How does X affect Y?\""""

RESPONSE_RULES = """RESPONSE FORMAT:
Respond with ONLY the valid JSON array. No markdown code blocks, no explanatory text. Just the raw JSON array starting with [ and ending with ]."""

CONTEXT_SEPARATOR = "\n\n---\n\n"


def difficulty_guide(difficulty: Difficulty) -> str:
    if difficulty == Difficulty.MIXED:
        return "Mix of easy (30%), medium (50%), and hard (20%) questions"
    return f"All questions should be {difficulty.value} difficulty"


def context_guide(
    group_index: int,
    total_groups: int,
    chapter: int | None = None,
    chapter_title: str | None = None,
) -> str:
    if chapter is not None:
        return (
            "SOURCE MATERIAL CONTEXT:\n"
            f'You are generating questions from Chapter {chapter}: "{chapter_title or f"Chapter {chapter}"}".'
        )
    if total_groups > 1:
        return (
            "SOURCE MATERIAL CONTEXT:\n"
            f"You are generating questions for topic area {group_index + 1} of {total_groups}."
        )
    return "SOURCE MATERIAL CONTEXT:\nUse the provided content as the source of facts."


def build_generation_prompt(
    item_type: ItemType,
    count: int,
    difficulty: Difficulty,
    contents: list[str],
    has_math: bool = False,
    group_index: int = 0,
    total_groups: int = 1,
    chapter: int | None = None,
    chapter_title: str | None = None,
) -> str:
    """
    Build the prompt for one generation task.

    Args:
        item_type: Requested item type
        count: Number of items to request
        difficulty: Difficulty profile
        contents: Selected chunk texts
        has_math: Whether any selected chunk contains math
        group_index: Index of the group being generated for
        total_groups: Number of groups in the run
        chapter: Chapter number in chapter mode
        chapter_title: Chapter title in chapter mode

    Returns:
        str: Complete prompt
    """
    context = CONTEXT_SEPARATOR.join(contents)
    kind = item_type.value.replace("_", " ")
    sections = [
        "You are an expert educator creating high-quality study material.",
        context_guide(group_index, total_groups, chapter, chapter_title),
        f'SOURCE CONTENT:\n"""\n{context}\n"""',
        "INSTRUCTIONS:\n"
        "1. Extract key facts, concepts, and relationships from the SOURCE CONTENT above.\n"
        f"2. Create {count} {kind} items based on these facts.",
        CONTENT_RULES,
        difficulty_guide(difficulty) + (MATH_GUIDE if has_math else ""),
        FORMAT_GUIDES[item_type].format(count=count),
        RESPONSE_RULES,
    ]
    return "\n\n".join(sections)
