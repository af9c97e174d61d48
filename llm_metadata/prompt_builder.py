"""Prompt builder for dataset metadata suggestions."""

from typing import Any, Dict, List, Optional, Sequence

MAX_PREVIEW_ROWS = 10
_MAX_CELL_CHARS = 200
_NO_SAMPLE_TEXT = "No sample data available."

_ENGLISH_TEMPLATE = """\
You are an expert data analyst writing catalogue metadata for a dataset.
Study the dataset preview below carefully:

{preview}

Using only the preview above, produce:
1. title: a concise, descriptive title on a single line
2. description: 2-3 paragraphs covering what the dataset contains, how it is structured and how it could be used
3. tags: 3-5 relevant keywords
4. category: the one category that fits this data best

Keep the description faithful to the actual rows shown. If the preview shows data issues
(missing values, inconsistent formatting, suspicious outliers), mention them in the description.

Return strictly valid JSON with exactly these keys: title, description, tags, category.
tags must be a JSON array of strings. Do NOT include any text outside the JSON object.
"""

_ARABIC_TEMPLATE = """\
أنت محلل بيانات خبير تكتب بيانات وصفية لفهرسة مجموعة بيانات.
ادرس معاينة مجموعة البيانات التالية بعناية:

{preview}

اعتماداً على المعاينة أعلاه فقط، أنشئ ما يلي باللغة العربية:
1. title: عنوان موجز ووصفي في سطر واحد
2. description: وصف من 2-3 فقرات يشرح محتوى مجموعة البيانات وبنيتها وحالات استخدامها المحتملة
3. tags: من 3 إلى 5 كلمات مفتاحية ذات صلة
4. category: الفئة الأنسب لهذه البيانات

يجب أن يعكس الوصف الصفوف الفعلية في المعاينة. إذا ظهرت مشكلات في البيانات
(قيم مفقودة، تنسيق غير متسق، قيم شاذة)، فاذكرها في الوصف.

أعد كائن JSON صالحاً فقط بالمفاتيح الإنجليزية التالية تماماً: title، description، tags، category.
يجب أن تكون tags مصفوفة JSON من النصوص. لا تضف أي نص خارج كائن JSON.
"""

_TEMPLATES: Dict[str, str] = {
    "en": _ENGLISH_TEMPLATE,
    "ar": _ARABIC_TEMPLATE,
}


def _format_cell(value: Any) -> str:
    if value is None:
        return "null"
    text = " ".join(str(value).split())
    text = text.replace("|", "\\|")
    if len(text) > _MAX_CELL_CHARS:
        text = text[: _MAX_CELL_CHARS - 1] + "…"
    return text


class MetadataPromptBuilder:
    """Build a bounded-size metadata prompt from a structural summary.

    The preview lists the column names followed by a markdown table of at
    most MAX_PREVIEW_ROWS sample rows. Missing cells render as ``null``.
    """

    def __init__(self, max_rows: int = MAX_PREVIEW_ROWS) -> None:
        self._max_rows = max(1, max_rows)

    def build_data_preview(
        self,
        sample_rows: Optional[Sequence[Dict[str, Any]]],
        column_names: Sequence[str],
    ) -> str:
        """Render column names and sample rows as plain text.

        Args:
            sample_rows: Sample rows keyed by column name. May be empty.
            column_names: Ordered column names for the table header.

        Returns:
            The preview block embedded into the prompt.
        """
        columns: List[str] = [str(name) for name in column_names]
        lines = [f"Columns: {', '.join(columns)}", ""]

        rows = list(sample_rows or [])[: self._max_rows]
        if not rows or not columns:
            lines.append(_NO_SAMPLE_TEXT)
            return "\n".join(lines)

        lines.append("Sample data:")
        lines.append("")
        lines.append("| " + " | ".join(_format_cell(name) for name in columns) + " |")
        lines.append("| " + " | ".join("---" for _ in columns) + " |")
        for row in rows:
            lines.append("| " + " | ".join(_format_cell(row.get(name)) for name in columns) + " |")
        return "\n".join(lines)

    def build_prompt(
        self,
        sample_rows: Optional[Sequence[Dict[str, Any]]],
        column_names: Sequence[str],
        language: str = "en",
    ) -> str:
        """Build the full prompt in the requested language.

        Unknown languages fall back to English.
        """
        template = _TEMPLATES.get(language, _ENGLISH_TEMPLATE)
        return template.format(preview=self.build_data_preview(sample_rows, column_names))
