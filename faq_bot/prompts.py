"""Prompt templates for query rephrasing and answer composition."""

NO_ANSWER = "I don't have that information."

OFF_TOPIC_TEMPLATE = "I can only help with {domain} related questions."

REPHRASE_INSTRUCTION = (
    "Given the above conversation, generate a search query to look up in order "
    "to get information relevant to the conversation"
)

ANSWER_SYSTEM_TEMPLATE = """You are a {domain} FAQs assistant. Your knowledge is limited to the information I provide in the context.
You will answer this question based solely on this information: {context}. Do not make up your own answer.
If the answer is not present in the information, you will respond '{no_answer}'
If a question is outside the context of {domain}, you will respond '{off_topic}'"""

# Separator between stuffed chunks
CONTEXT_SEPARATOR = "\n\n"


def off_topic_reply(domain: str) -> str:
    return OFF_TOPIC_TEMPLATE.format(domain=domain)


def build_answer_system_prompt(domain: str, context: str) -> str:
    """Fill the answer template with the domain and the stuffed context."""
    return ANSWER_SYSTEM_TEMPLATE.format(
        domain=domain,
        context=context,
        no_answer=NO_ANSWER,
        off_topic=off_topic_reply(domain),
    )
