from __future__ import annotations

# =========================
# CLOUD (chat completions)
# =========================

CLOUD_MAX_CHARS = 4000

CLOUD_METADATA_PROMPT = '''The following text was extracted from the first page(s) of an academic paper PDF.
Extract its bibliographic information and return it as valid JSON.

Text:
"""
{text}
"""

Follow this JSON schema exactly:
{{
  "title": "Paper title",
  "authors": ["Author 1", "Author 2", "Author 3"],
  "year": 2024,
  "journal": "Journal name",
  "volume": "Volume number",
  "issue": "Issue number",
  "pages": "Page range",
  "doi": "DOI",
  "abstract": "Abstract (if present)",
  "keywords": ["Keyword 1", "Keyword 2"],
  "confidence": 0.95
}}

Rules:
1. Return valid JSON only.
2. Use null for any information you cannot find.
3. Return authors as an array, one element per author. Never join several authors into one string.
4. Return the year as a number.
5. "confidence" is your estimate of extraction accuracy, between 0 and 1.
6. Always include the DOI if there is one.
7. Always extract the abstract if there is one.
8. Return only the JSON, with no explanation.
9. If there are several authors, add each of them to the array separately.
10. Copy the abstract as complete sentences. Do not summarize it.

JSON:'''

# =========================
# LOCAL (Ollama generate)
# =========================

LOCAL_MAX_CHARS = 3000

LOCAL_METADATA_PROMPT = '''Extract accurate bibliographic information from the text of the following academic paper and return it as JSON.

Text:
{text}

Return only JSON in the following format:
{{
  "title": "Paper title",
  "authors": ["Author 1", "Author 2"],
  "year": "Publication year",
  "journal": "Journal name",
  "volume": "Volume",
  "issue": "Issue",
  "pages": "Pages",
  "doi": "DOI",
  "abstract": "Abstract (optional)"
}}

Notes:
- Extract only information that is actually in the text.
- Leave uncertain information as an empty string.
- Return authors as an array, one element per author.
- Copy the abstract verbatim; do not summarize it.
- Keep the JSON format exactly.
- Return only the JSON, with no extra explanation.'''
