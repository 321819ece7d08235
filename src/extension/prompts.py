"""Instruction templates and query assembly for the code commands."""

COMMENT_INSTRUCTION = (
    "Add clear, concise comments to the following code explaining what each part does. "
    "Return only the commented code, without surrounding explanation."
)
DESCRIBE_INSTRUCTION = (
    "Describe what the following code does. Explain its purpose, inputs, outputs, "
    "and any notable edge cases."
)
REWRITE_INSTRUCTION = (
    "Rewrite the following code so it is cleaner, more readable, and idiomatic "
    "while keeping its behavior unchanged. Return only the rewritten code."
)


def build_query(instruction: str, selection: str) -> str:
    """Join an instruction and the selected code into a single user message."""

    return f"{instruction.strip()}\n\n{selection}"


def build_question_query(question: str, selection: str) -> str:
    """Use a free-form question as the instruction for the selected code."""

    return build_query(question, selection)
