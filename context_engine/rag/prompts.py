"""Prompt templates for the multi-pass strategy."""

from collections.abc import Sequence

from ..schemas.results import SegmentResult

SEGMENT_SYSTEM_PROMPT = (
    "You are a document analysis assistant. "
    "Your task is to extract relevant information from the provided document segment."
)

AGGREGATION_SYSTEM_PROMPT = "You are an expert at synthesizing and summarizing information from multiple sources."

EXTRACTION_INSTRUCTIONS = (
    "INSTRUCTIONS:\n"
    "1. Analyze the document content in this segment.\n"
    "2. Extract any information relevant to the user's question/task.\n"
    "3. If this segment contains relevant information, provide a detailed response.\n"
    "4. If this segment does not contain relevant information, indicate that briefly.\n"
    "5. Note any partial or ambiguous information that might need context from other segments.\n"
)

AGGREGATION_INSTRUCTIONS = (
    "INSTRUCTIONS:\n"
    "1. Synthesize the information from all segment results.\n"
    "2. Provide a comprehensive, well-organized response to the user's question.\n"
    "3. Remove any redundancy or duplicate information.\n"
    "4. If there are conflicting pieces of information, note them.\n"
    "5. Ensure the response is complete and addresses the user's original question/task.\n"
)


def build_segment_system_prompt(system_prompt: str | None = None) -> str:
    """Segment-analysis system prompt, prefixed by the caller's own system prompt when given."""
    if system_prompt:
        return f"{system_prompt}\n\nFor this segment analysis task: {SEGMENT_SYSTEM_PROMPT}"
    return SEGMENT_SYSTEM_PROMPT


def build_extraction_prompt(segment_text: str, user_input: str, segment_number: int, total_segments: int) -> str:
    return (
        f"This is segment {segment_number} of {total_segments} from the document(s).\n\n"
        f"DOCUMENT CONTENT:\n{segment_text}"
        f"\n\nUSER QUESTION/TASK:\n{user_input}"
        f"\n\n{EXTRACTION_INSTRUCTIONS}"
    )


def build_aggregation_prompt(
    results: Sequence[SegmentResult], user_input: str, aggregation_prompt: str | None = None
) -> str:
    """
    Prompt asking the model to merge per-segment findings into one answer.

    Partial results are listed in segment order. Custom aggregation
    instructions, if any, are placed in front of the generated prompt.
    """
    parts = [
        "You are synthesizing information from multiple document segments to answer the user's question.\n\n",
        f"USER QUESTION/TASK:\n{user_input}",
        "\n\nPARTIAL RESULTS FROM DOCUMENT SEGMENTS:\n\n",
    ]
    for result in results:
        parts.append(f"--- Segment {result.segment_number} Result ---\n{result.partial_result}\n\n")
    parts.append(AGGREGATION_INSTRUCTIONS)

    prompt = "".join(parts)
    if aggregation_prompt:
        return f"{aggregation_prompt}\n\n{prompt}"
    return prompt
