"""Instructions sent to the recognition provider."""

from __future__ import annotations

ODOMETER_INSTRUCTIONS = (
    "Analyze this dashboard image. Identify the odometer reading (total distance traveled). "
    "Ignore trip meters (usually smaller numbers or with decimals). "
    "Return the value as an integer together with a confidence between 0 and 1."
)


def document_instructions(expected_invoice_number: str) -> str:
    """Instructions for classifying a delivery document photo.

    The expected invoice number is quoted into the prompt so the model can
    judge ``numberMatches`` itself.
    """
    number = expected_invoice_number.strip()
    return (
        "You are a logistics specialist. Analyze this image.\n"
        f'The expected invoice (NF) number is: "{number}".\n'
        "\n"
        "Rules:\n"
        '1. Classify the image as "RECEIPT" (proof-of-delivery stub, invoice, receipt), '
        '"GOODS" (boxes, products, truck) or "OTHER".\n'
        f'2. If it is a "RECEIPT", look for the invoice number "{number}" in the image. '
        "It may be handwritten or printed.\n"
        '3. If it is a "RECEIPT", check whether the recipient field carries a signature '
        "(scribble or written name).\n"
        "\n"
        "Return the result as JSON following the schema exactly."
    )
