"""
Two-Stage Transaction Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (amount, category)
- Amount must be positive

STAGE 2 - SEMANTIC VALIDATION:
- The category belongs to the account
- The category's type matches the transaction's type
- Absurd amount detection
- Far-future date detection

Stage 2 only runs if stage 1 passes.

Validation NEVER silently fixes issues. Errors block the write in the
ledger store; warnings are shown on the form and the write goes ahead.
Messages are user-facing and therefore in Portuguese.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from fintrack.config import AppSettings, get_settings
from fintrack.models.ledger import Category, TransactionDraft
from fintrack.models.validation import ValidationIssue, ValidationResult


class TransactionValidator:
    """Validates transaction drafts against an account's categories."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not draft.amount.is_finite() or draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Por favor, informe um valor válido.",
                severity="error",
                suggested_fix="Informe um valor maior que zero",
            ))

        if draft.category is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Por favor, selecione uma categoria.",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        draft: TransactionDraft,
        categories: Sequence[Category],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        # Judge the account's own record, not the caller's snapshot of it
        owned = {c.id: c for c in categories}
        category = owned.get(draft.category.id)
        if category is None:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"A categoria '{draft.category.name}' não existe nesta conta.",
                severity="error",
                suggested_fix="Selecione uma das categorias disponíveis",
            ))
        elif category.type != draft.type:
            issues.append(ValidationIssue(
                field="category",
                issue_type="type_mismatch",
                message=(
                    f"A categoria '{category.name}' não pode ser usada "
                    f"em uma {_type_label(draft.type.value)}."
                ),
                severity="error",
                suggested_fix="Escolha uma categoria do mesmo tipo da transação",
            ))

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"O valor (R$ {draft.amount:,.2f}) parece muito alto.",
                severity="warning",
                suggested_fix="Confira se o valor está correto",
            ))

        max_future_date = datetime.now(draft.date.tzinfo) + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if draft.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"A data ({draft.date:%d/%m/%Y}) está muito no futuro.",
                severity="warning",
                suggested_fix="Confira se a data está correta",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(
        self,
        draft: TransactionDraft,
        categories: Sequence[Category],
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            draft: The transaction data to validate
            categories: The owning account's current category set

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(draft, categories)
            all_issues.extend(semantic_issues)

        warnings = [
            issue.message for issue in all_issues if issue.severity == "warning"
        ]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Summary shown above the transaction form.
        """
        if result.is_valid and not result.warnings:
            return "✅ Tudo certo!"

        lines = []

        if result.has_errors:
            lines.append("❌ Corrija os seguintes campos:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Verifique:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)


def _type_label(transaction_type: str) -> str:
    return "receita" if transaction_type == "income" else "despesa"
