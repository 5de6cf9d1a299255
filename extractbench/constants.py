"""Reserved values shared by the extraction pipeline and the evaluator.

These strings are written verbatim into result rows by the extraction
pipeline, so they are compared verbatim here.
"""

# A field that has no value in the document.
NOT_PRESENT = "Not Present"

# Extraction still running for this (file, model) cell.
PENDING_PREFIX = "Pending"

# Extraction failed for this (file, model) cell, e.g. "Error: Rate limit".
ERROR_PREFIX = "Error:"

# Reserved model name under which human-validated values are stored.
GROUND_TRUTH_MODEL = "Ground Truth"
