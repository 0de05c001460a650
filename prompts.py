"""
Centralized prompts for the Veckomeny recipe generator.

Templates use LangChain f-string syntax, so literal JSON braces are doubled.
"""

# --- SHARED OUTPUT CONTRACT ---

RECIPE_JSON_FORMAT = """VIKTIGT: Svara ENDAST med JSON. Ingen annan text före eller efter JSON.

Svara med exakt detta JSON-format:
{{
  "name": "Receptnamn på svenska",
  "description": "Kort beskrivning på svenska",
  "servings": {servings},
  "prepTime": "X min",
  "cookTime": "X min",
  "difficulty": "Lätt/Medel/Svår",
  "estimatedCost": "XX",
  "nutrition": {{
    "calories": 450,
    "protein": 25,
    "carbs": 35,
    "fat": 20,
    "fiber": 8
  }},
  "ingredients": [
    {{"name": "Ingrediens", "amount": "X", "unit": "g/ml/st/msk"}}
  ],
  "instructions": [
    "Steg 1...",
    "Steg 2..."
  ],
  "tips": "Valfritt tips"
}}"""

COMMON_REQUIREMENTS = """- Max {max_cost} kr per portion
- {servings} portioner
- Receptet ska vara för dag {day_number} av {total_days}
- Skapa ett NYTT och ANNORLUNDA recept"""

# --- MODE TEMPLATES ---

SHOPPING_LIST_TEMPLATE = (
    """Du är en svensk kock. Skapa ETT recept baserat på produkterna i min inköpslista.

MIN INKÖPSLISTA:
{product_list}

{exclude_block}

{constraints_block}

KRAV:
"""
    + COMMON_REQUIREMENTS
    + """
- Använd ENDAST produkter från inköpslistan ovan

"""
    + RECIPE_JSON_FORMAT
)

STORE_ONLY_TEMPLATE = (
    """Du är en svensk kock. Skapa ETT recept baserat på dessa produkter.

TILLGÄNGLIGA PRODUKTER:
{product_list}

{exclude_block}

{constraints_block}

KRAV:
"""
    + COMMON_REQUIREMENTS
    + """
- Använd minst 3 produkter från listan ovan
- Använd INGA ingredienser som inte finns i listan ovan (salt, peppar och vatten undantaget)

"""
    + RECIPE_JSON_FORMAT
)

STORE_PLUS_TEMPLATE = (
    """Du är en svensk kock. Skapa ETT recept som använder produkter från veckans erbjudanden.

VECKANS ERBJUDANDEN (använd gärna dessa):
{product_list}

{exclude_block}

{constraints_block}

KRAV:
"""
    + COMMON_REQUIREMENTS
    + """
- Försök använda produkter från listan ovan för att spara pengar
- Du FÅR också använda andra vanliga ingredienser som inte finns i listan

"""
    + RECIPE_JSON_FORMAT
)

FREE_GENERATE_TEMPLATE = (
    """Du är en svensk kock. Skapa ETT recept baserat på mina preferenser.

{exclude_block}

{constraints_block}

KRAV:
"""
    + COMMON_REQUIREMENTS
    + """
- Använd vanliga ingredienser som finns i svenska matbutiker

"""
    + RECIPE_JSON_FORMAT
)

MODE_TEMPLATES = {
    "shopping-list": SHOPPING_LIST_TEMPLATE,
    "store-only": STORE_ONLY_TEMPLATE,
    "store-plus": STORE_PLUS_TEMPLATE,
    "free-generate": FREE_GENERATE_TEMPLATE,
}

EXCLUDE_USED_TEMPLATE = "UNDVIK dessa huvudingredienser (redan använda): {used}"

# --- USER-FACING MESSAGES ---

EMPTY_SHOPPING_LIST_MESSAGE = (
    "Inköpslistan är tom eller kunde inte hittas. Försök med ett annat produktläge."
)
EMPTY_CATALOG_MESSAGE = (
    "Inga produkter hittades för valda butiker. Välj fler butiker eller ändra produktläge."
)
