from __future__ import annotations

from ..models.drafts import ExpenseCategory, InsuranceType, PaymentMethod

"""Keyword groups and vocabularies for the French clinic spreadsheets.

A keyword group lists the synonyms that may title one logical column. Order
inside a group does not matter for matching (headers are scanned in column
order); it only documents the most common spelling first. Vocabularies map a
normalized substring of the cell text to a domain value, first hit wins.
"""

# --- header row signals -------------------------------------------------
PATIENT_HEADER_SIGNALS = frozenset({"nom", "prenom", "patient", "nomcomplet", "nomprenom"})
LEDGER_HEADER_SIGNALS = PATIENT_HEADER_SIGNALS | {
    "date", "montant", "designation", "libelle", "motif",
}

# --- patients -----------------------------------------------------------
LAST_NAME = ("nom", "nomfamille", "lastname", "surname")
FIRST_NAME = ("prenom", "firstname", "givenname", "petitnom")
FULL_NAME = (
    "nomprenom", "nometprenom", "nomcomplet", "patient", "fullname", "identite", "nomprenoms",
)
BIRTH_DATE = ("naissance", "nele", "neele", "dob", "age", "datenaissance")
NATIONAL_ID = ("cin", "cnie", "carte", "identite", "passport", "id")
PHONE = ("telephone", "portable", "contact", "gsm", "tel", "mobile", "num")
EMAIL = ("email", "courriel", "mail", "adressemail")
INSURANCE = ("mutuelle", "assurance", "organisme", "cnss", "cnops")
INSURANCE_NUMBER = ("immatriculation", "nomutuelle", "police", "affiliation", "numimmat")
ADDRESS = ("adresse", "lieu", "domicile", "residence", "ville", "habitation")
MEDICAL_HISTORY = ("antecedents", "historique", "maladies", "passif", "pathologies", "atcd")
ALLERGIES = ("allergies", "sensibilite", "reaction", "intolerance")

INSURANCE_VOCABULARY: tuple[tuple[tuple[str, ...], InsuranceType], ...] = (
    (("cnss",), InsuranceType.PUBLIC_A),
    (("cnops",), InsuranceType.PUBLIC_B),
    (("prive", "axa", "saham", "rma"), InsuranceType.PRIVATE),
)

# --- ledger (expenses / revenues) ---------------------------------------
AMOUNT = ("montant", "prix", "somme", "amount", "total", "valeur", "honoraire")
# "le" ("le 15/03") is left out: as a substring it matches "libellé"
LEDGER_DATE = ("date", "jour", "periode", "moment", "time", "echeance")
PAYMENT_METHOD = ("paiement", "mode", "reglement", "type", "moyen")
EXPENSE_DESCRIPTION = ("designation", "description", "motif", "objet", "label", "libelle")
EXPENSE_CATEGORY = ("categorie", "type", "classe", "nature")
REVENUE_DESCRIPTION = ("motif", "acte", "objet", "libelle", "description", "designation")
REVENUE_PATIENT = ("patient", "client", "nom", "beneficiaire", "nomcomplet")

PAYMENT_VOCABULARY: tuple[tuple[tuple[str, ...], PaymentMethod], ...] = (
    (("cheque",), PaymentMethod.CHECK),
    (("virement",), PaymentMethod.TRANSFER),
    (("carte", "cb"), PaymentMethod.CARD),
)

CATEGORY_VOCABULARY: tuple[tuple[tuple[str, ...], ExpenseCategory], ...] = (
    (("loyer", "fixe", "charge"), ExpenseCategory.FIXED),
    (("conso", "medical", "achat"), ExpenseCategory.CONSUMABLE),
    (("salaire", "prime", "perso"), ExpenseCategory.SALARY),
    (("materiel", "equip", "immo"), ExpenseCategory.EQUIPMENT),
    (("tax", "impot", "etat"), ExpenseCategory.TAX),
)

EXPENSE_DESCRIPTION_DEFAULT = "Dépense importée"
REVENUE_DESCRIPTION_DEFAULT = "Recette importée"
