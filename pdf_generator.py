"""
PDF generation module for Veckomeny.

This module renders a meal plan and its shopping list to PDF using fpdf2. The
shopping list keeps the aggregator's order, grouped under category headings.
"""

from itertools import groupby
from typing import List

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from aggregator import format_quantity
from models import RecipeEntry, ShoppingList

NEXT_LINE = {"new_x": XPos.LMARGIN, "new_y": YPos.NEXT}


class MealPlanPDF(FPDF):
    """
    Custom PDF class for meal plans.

    Inherits from FPDF.
    """

    def __init__(self, title="Veckomeny"):
        super().__init__()
        self.title_text = title

    def header(self):
        """Set up the PDF header."""
        self.set_font("Helvetica", "B", 16)
        self.cell(0, 10, self.clean_text(self.title_text), align="C", **NEXT_LINE)
        self.ln(5)

    def clean_text(self, text):
        """
        Sanitize text for the built-in latin-1 fonts.

        Args:
            text (str): The text to clean.

        Returns:
            str: The text with unsupported characters replaced.
        """
        if not text:
            return ""
        return str(text).encode("latin-1", "replace").decode("latin-1")

    def write_shopping_list(self, shopping_list: ShoppingList):
        self.set_font("Helvetica", "B", 14)
        self.cell(0, 10, "Inköpslista", **NEXT_LINE)
        if not shopping_list.items:
            self.set_font("Helvetica", "", 10)
            self.cell(0, 7, "Inga ingredienser.", **NEXT_LINE)
        for category, items in groupby(shopping_list.items, key=lambda item: item.category):
            self.set_font("Helvetica", "B", 11)
            self.set_fill_color(240, 240, 240)
            self.cell(0, 8, self.clean_text(category), fill=True, **NEXT_LINE)
            self.set_font("Helvetica", "", 10)
            for item in items:
                quantity = format_quantity(item.total_amount, item.unit)
                line = f"[ ] {item.name}" + (f" - {quantity}" if quantity else "")
                self.cell(0, 6, self.clean_text(line), **NEXT_LINE)
        self.ln(4)
        self.set_font("Helvetica", "B", 11)
        self.cell(0, 8, f"Uppskattad kostnad: {shopping_list.total_cost:.2f} kr", **NEXT_LINE)

    def write_recipe(self, entry: RecipeEntry):
        recipe = entry.recipe
        self.set_font("Helvetica", "B", 16)
        self.set_text_color(255, 75, 75)
        self.cell(0, 10, self.clean_text(f"Dag {entry.day_number}: {recipe.name}"), **NEXT_LINE)
        self.set_text_color(0, 0, 0)
        self.set_font("Helvetica", "", 10)
        if recipe.description:
            self.multi_cell(0, 5, self.clean_text(recipe.description), **NEXT_LINE)
        details = [
            f"Portioner: {recipe.servings}" if recipe.servings else "",
            f"Förberedelse: {recipe.prep_time}" if recipe.prep_time else "",
            f"Tillagning: {recipe.cook_time}" if recipe.cook_time else "",
            f"Kostnad: {recipe.cost:g} kr" if recipe.cost else "",
        ]
        details = " | ".join(d for d in details if d)
        if details:
            self.multi_cell(0, 5, self.clean_text(details), **NEXT_LINE)
        self.ln(3)

        if recipe.ingredients:
            self.set_font("Helvetica", "B", 12)
            self.cell(0, 8, "Ingredienser", **NEXT_LINE)
            self.set_font("Helvetica", "", 10)
            for ingredient in recipe.ingredients:
                amount = f"{ingredient.amount or ''} {ingredient.unit}".strip()
                line = f"- {amount} {ingredient.name}" if amount else f"- {ingredient.name}"
                self.cell(0, 5, self.clean_text(line), **NEXT_LINE)
            self.ln(3)

        if recipe.instructions:
            self.set_font("Helvetica", "B", 12)
            self.cell(0, 8, "Gör så här", **NEXT_LINE)
            self.set_font("Helvetica", "", 10)
            for number, step in enumerate(recipe.instructions, start=1):
                self.multi_cell(0, 5, self.clean_text(f"{number}. {step}"), **NEXT_LINE)
        if recipe.tips:
            self.ln(2)
            self.set_font("Helvetica", "I", 10)
            self.multi_cell(0, 5, self.clean_text(f"Tips: {recipe.tips}"), **NEXT_LINE)


def generate_pdf(title: str, entries: List[RecipeEntry], shopping_list: ShoppingList) -> bytes:
    """
    Generate a PDF containing the shopping list and one page per plan day.

    Args:
        title (str): Heading printed on every page, usually the plan name.
        entries (List[RecipeEntry]): The plan's recipes.
        shopping_list (ShoppingList): The aggregated shopping list.

    Returns:
        bytes: The generated PDF file as bytes.
    """
    pdf = MealPlanPDF(title)
    pdf.add_page()
    pdf.write_shopping_list(shopping_list)
    for entry in sorted(entries, key=lambda e: e.day_number):
        pdf.add_page()
        pdf.write_recipe(entry)
    return bytes(pdf.output())
