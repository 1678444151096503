"""Magic values shared by configuration authors and the engine."""

# Option values that let the user choose All, Any or None from a set.
ID_ALL = "fbd4bc94-23b7-40fa-b3bc-b3a0e7faf173"
ID_ANY = "3cc42087-3b95-4b7e-82e4-d2d8466daa8f"
ID_NONE = "deeee249-c2eb-4598-8824-3db79927c7a6"
# Unselected optional value
ID_UNDEFINED = "a9e2b542-33b8-4dde-93d6-7eb97d395c08"

SAVED_CRITERIA_SUFFIX = "SavedCriterion"
PROOF_CATEGORY_FIELDS = ("hp_proofCategory", "proofCategory")
DEFAULT_NO_RESULTS_MESSAGE = "No results were found."

CONSTANTS = {
    "ID_ALL": ID_ALL,
    "ID_ANY": ID_ANY,
    "ID_NONE": ID_NONE,
    "ID_UNDEFINED": ID_UNDEFINED,
}
