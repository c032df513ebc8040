"""
Question generation prompt.

Asks the model for N specific, diverse questions answerable from one
chunk, numbered one per line with no commentary.

Dependencies: langchain_core.prompts
System role: Prompt template for hypothetical question synthesis
"""

from langchain_core.prompts import ChatPromptTemplate

QUESTION_SYSTEM_PROMPT = """You generate search questions for a document index.

Given a passage, write questions that a reader could ask and that the passage answers.

## Rules
1. Each question must be answerable from the passage alone
2. Be specific: mention the concrete names, terms and figures the passage uses
3. Cover different facts in the passage; do not rephrase the same question
4. Number the questions 1 to N, one per line
5. Output only the questions, with no introduction or explanation"""

QUESTION_PROMPT = ChatPromptTemplate.from_messages([
    ("system", QUESTION_SYSTEM_PROMPT),
    ("human", """Generate exactly {count} questions for this passage.

Passage:
{chunk}"""),
])
