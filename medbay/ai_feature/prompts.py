"""Prompt templates for the inventory assistant. Placeholders: {input}, {context}."""

RESOLVE_SUPPLY_PROMPT = """
Answer the question only based on the context.
Your task is to match as closely as possible, the medication from the input to an item from the context.
The id should be the number next to the medication name in the context.

Your output should only consist of the id number.
If the medication is not found in the context, return "0".

### Example:
**User Input:** "How much Benadril do we have in stock?"
**Transformed Output:** "2"

Context: {context}

Input: {input}
Assistant:
"""

SUMMARIZE_STOCK_PROMPT = """
Only Answer using the context and data from the database.

Relay all information that is relevant but only relevant information to the input.


Use quantity for quantity.
Use length for amount of packages.

Use location for location.
Use type for type
Use quantity_in_pack for cap.
Use name for corrected name
Use strength_or_volume for strength/volume
Use route_of_use for route
Use possible_side_effects for possible side effects

Context:
{context}

### Example:
**User Input:** "How much Benadril do we have in stock?"
**Output:** "There is 69 capsules over 2 packages with a cap of 60 capsules per package of Diphenhydramine (Benadryl) in stock?"

Input: {input}
Assistant:
"""


def render(template: str, question: str, context: str) -> str:
    return template.format(input=question, context=context)
