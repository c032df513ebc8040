"""
Answer synthesis prompt.

Defines the default system prompt and the prompt template used to
answer a question from retrieved chunks. The system prompt, context and
question are template variables, so caller-supplied text is never
parsed as a template.

Dependencies: langchain_core.prompts
System role: Prompt template for answer synthesis
"""

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from vectorqa.models.search import SearchResult

DEFAULT_SYSTEM_PROMPT = """You are a knowledgeable assistant that answers questions using a document knowledge base.

## Instructions
1. Answer ONLY from the provided context; do not use outside knowledge
2. Be thorough: combine every relevant detail the context offers
3. If the context does not fully answer the question, answer what it does cover and state clearly what information is missing
4. Answer directly; do not open with phrases like "Based on the context" or "According to the documents"
5. Mention the source of a fact when several sources disagree"""

NO_CONTEXT_TEXT = "No relevant context was found in the knowledge base."

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "{system_prompt}"),
    ("human", """Context:
{context}

Question: {question}

Keep the answer under {max_answer_length} characters."""),
])


def format_context(results: list[SearchResult]) -> str:
    """
    Render ranked chunks in rank order.

    Args:
        results: Ranked retrieval results

    Returns:
        str: Numbered context blocks, or a no-context notice
    """
    if not results:
        return NO_CONTEXT_TEXT
    blocks = []
    for rank, result in enumerate(results, start=1):
        blocks.append(
            f"[{rank}] Source: {result.source_id} (chunk {result.chunk_index}, relevance {result.score:.3f})\n"
            f"{result.chunk_text}"
        )
    return "\n\n---\n\n".join(blocks)


def build_answer_messages(
    question: str,
    results: list[SearchResult],
    max_answer_length: int,
    system_prompt: str | None = None,
) -> list[BaseMessage]:
    """
    Build chat messages for one answer.

    Args:
        question: User question, passed verbatim
        results: Ranked context chunks
        max_answer_length: Target answer length in characters
        system_prompt: Override for DEFAULT_SYSTEM_PROMPT

    Returns:
        list[BaseMessage]: System and human messages
    """
    return ANSWER_PROMPT.format_messages(
        system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
        context=format_context(results),
        question=question,
        max_answer_length=max_answer_length,
    )
