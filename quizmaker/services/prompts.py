from typing import Dict, Sequence

TYPE_INSTRUCTIONS = {
    "mcq": (
        "- MCQ (Multiple Choice Questions): Provide exactly 4 options. Each option must be a complete "
        "sentence or phrase - never truncate with \"...\" or an ellipsis. The correct_answer must be the "
        "full text of the correct option."
    ),
    "vsa": (
        "- VSA (Very Short Answer): Questions that require a brief answer of 1-3 sentences. Set options "
        "to null. The correct_answer should be a concise but complete answer."
    ),
    "lsa": (
        "- LSA (Long/Short Answer): Questions requiring detailed explanations of 3-6 sentences. Set "
        "options to null. The correct_answer should be a thorough explanation."
    ),
}

OUTPUT_SCHEMA = """[
  {
    "question_type": "mcq" | "vsa" | "lsa",
    "question": "The full question text",
    "options": ["Option A full text", "Option B full text", "Option C full text", "Option D full text"] | null,
    "correct_answer": "The complete correct answer text"
  }
]"""


def distribute(count: int, types: Sequence[str]) -> Dict[str, int]:
    """Split ``count`` across ``types`` as evenly as possible, earlier types taking the remainder."""
    base, extra = divmod(count, len(types))
    return {t: base + (1 if i < extra else 0) for i, t in enumerate(types)}


def research_messages(topic: str) -> list[dict]:
    prompt = (
        "You are a subject matter expert. Provide a comprehensive, factual overview of the following "
        "topic that can be used to generate educational assessment questions. Cover key concepts, "
        "definitions, principles, important facts, and relationships. Be thorough and accurate.\n\n"
        f"Topic: {topic}\n\n"
        "Provide a detailed overview in 2000-3000 words."
    )
    return [{"role": "user", "content": prompt}]


def question_messages(count: int, types: Sequence[str], grounding: str, topic: str | None = None) -> list[dict]:
    split = distribute(count, types)
    plan = ", ".join(f"{n} {t}" for t, n in split.items() if n)
    source = f'the provided research content about "{topic}"' if topic else "the provided text content"
    sys = f"""You are an expert educational assessment creator. Generate exactly {count} practice test questions based ONLY on {source}.

Question types to generate: {", ".join(types)} (target split: {plan})
{chr(10).join(TYPE_INSTRUCTIONS[t] for t in types)}

CRITICAL RULES:
1. ALL questions MUST be answerable from the provided material alone. Do NOT ask about anything it does not cover.
2. Distribute question types as evenly as possible among the requested types.
3. For MCQ options, write COMPLETE sentences/phrases. NEVER truncate with "..." or an ellipsis.
4. Questions should test understanding at various cognitive levels (recall, comprehension, application, analysis).
5. Make questions clear and unambiguous.

You MUST respond with a valid JSON array using this exact structure:
{OUTPUT_SCHEMA}

Respond ONLY with the JSON array. No markdown, no code blocks, no explanation."""
    what = "research" if topic else "text"
    return [
        {"role": "system", "content": sys},
        {"role": "user", "content": f"Generate {count} questions from this {what}:\n\n{grounding}"},
    ]
