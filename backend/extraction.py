"""AI extraction of daily production and RFT reports from scanned documents.

Groq vision (primary, images only) with Claude as the fallback, which also
reads PDFs. Either way the model is asked for JSON in the dashboard's record
shape; the builders below turn that into records, tolerating missing fields.
"""

import json
import logging
from datetime import date

import requests
from anthropic import Anthropic
from pydantic import ValidationError

import config
from aggregation import derive_shift_totals, refresh_rft_percentages
from dates import format_display_date
from schemas import (
    IndustryData, ProductionRecord, RFTReportRecord, ShiftTotals, new_id, now_iso,
)

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("application/pdf", "image/png", "image/jpeg", "image/webp")

client = None


class ExtractionError(Exception):
    """The document could not be turned into a record; the message is user-facing."""


def get_client():
    global client
    if client is None:
        if not config.ANTHROPIC_API_KEY:
            return None
        client = Anthropic(api_key=config.ANTHROPIC_API_KEY)
    return client


PRODUCTION_PROMPT = """You are an expert data extraction specialist for textile manufacturing reports.
Extract production data from the "Daily Dyeing Production Report" of LANTABUR GROUP.

Look for summary tables or headers labeled "Color Group Wise", "Inhouse/Sub Contract", and "Taqwa/Others".

For both "Lantabur" and "Taqwa" extract:
- Total Weight (kg)
- Loading Capacity %
- Inhouse vs Sub Contract weights
- Every row of the "Color Group Wise" table, using exactly these group names:
  100% Polyester, Average, Black, Dark, Extra Dark, Double Part, Double Part -Black,
  Light, Medium, N/wash, Royal, White

Return the date in "DD MMM YYYY" format. All numeric values must be numbers.

Respond with ONLY valid JSON in this exact format (no markdown, no explanation):
{
  "date": "01 Jan 2024",
  "lantabur": {
    "total": 0, "loadingCap": 0,
    "colorGroups": [{"groupName": "Black", "weight": 0}],
    "inhouse": 0, "subContract": 0
  },
  "taqwa": {
    "total": 0, "loadingCap": 0,
    "colorGroups": [{"groupName": "Black", "weight": 0}],
    "inhouse": 0, "subContract": 0
  }
}"""

RFT_PROMPT = """You are an expert data extraction specialist for textile manufacturing "Daily RFT Reports".
Extract every row of the main production table and the summary metrics at the bottom.

1. Table columns: MC, Batch no., Buyer, order, Colour, COLOR GROUP, F/Type, F.Qty, Load Cap%,
   Shade ok, Shade not ok, Dyeing Type, Shift Unload, Remarks.
2. Summary boxes for operators "YOUSUF" and "HUMAYUN": "TOTAL QTY (KG)" goes to
   shiftPerformance, "TOTAL COUNT" (number of batches) goes to shiftCount.
3. "BULK RFT %" and "LAB RFT %" if listed.

All numeric values must be numbers; shadeOk/shadeNotOk are booleans.

Respond with ONLY valid JSON in this exact format (no markdown, no explanation):
{
  "date": "01 Jan 2024",
  "unit": "Unit-02",
  "companyName": "Lantabur Apparels Ltd.",
  "entries": [
    {
      "mc": "", "batchNo": "", "buyer": "", "order": "", "colour": "", "colorGroup": "",
      "fType": "", "fQty": 0, "loadCapPercent": 0, "shadeOk": true, "shadeNotOk": false,
      "dyeingType": "B/D CARD", "shiftUnload": "", "remarks": ""
    }
  ],
  "bulkRftPercent": 0,
  "labRftPercent": 0,
  "shiftPerformance": {"yousuf": 0, "humayun": 0},
  "shiftCount": {"yousuf": 0, "humayun": 0}
}"""


def check_mime_type(mime_type: str) -> None:
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise ExtractionError("Unsupported file format. Please upload a PDF or an Image.")


def extract_json(text: str) -> dict:
    """Extract JSON object from AI response text, handling markdown code blocks."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()

    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object found in response")
    return json.loads(text[start:end])


def parse_with_groq(base64_data: str, mime_type: str, prompt: str) -> str:
    """Parse a report image using Groq Vision. Returns raw JSON text."""
    response = requests.post(
        config.GROQ_API_URL,
        headers={
            "Authorization": f"Bearer {config.GROQ_API_KEY}",
            "Content-Type": "application/json",
        },
        json={
            "model": config.GROQ_VISION_MODEL,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{base64_data}"},
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
            "temperature": 0.1,
            "max_tokens": 8192,
            "response_format": {"type": "json_object"},
        },
        timeout=config.EXTRACTION_TIMEOUT,
    )

    if response.status_code != 200:
        raise ExtractionError(f"Groq API error {response.status_code}: {response.text[:500]}")

    result = response.json()
    return result["choices"][0]["message"]["content"].strip()


def parse_with_claude(base64_data: str, mime_type: str, prompt: str) -> str:
    """Parse a report image or PDF using Claude. Returns raw JSON text."""
    c = get_client()
    if not c:
        raise ExtractionError("ANTHROPIC_API_KEY not configured")

    block_type = "document" if mime_type == "application/pdf" else "image"
    response = c.messages.create(
        model=config.CLAUDE_MODEL,
        max_tokens=8192,
        messages=[
            {
                "role": "user",
                "content": [
                    {
                        "type": block_type,
                        "source": {"type": "base64", "media_type": mime_type, "data": base64_data},
                    },
                    {"type": "text", "text": prompt},
                ],
            }
        ],
        timeout=config.EXTRACTION_TIMEOUT,
    )
    return response.content[0].text


def run_extraction(base64_data: str, mime_type: str, prompt: str) -> dict:
    """Send a document to the vision models and return the parsed JSON payload."""
    if not base64_data:
        raise ExtractionError("Missing file data")
    check_mime_type(mime_type)

    failures = []
    if config.GROQ_API_KEY and mime_type != "application/pdf":
        try:
            return extract_json(parse_with_groq(base64_data, mime_type, prompt))
        except (requests.RequestException, ExtractionError, ValueError, KeyError, IndexError) as e:
            logger.warning("Groq vision failed: %s", e)
            failures.append(f"Groq vision failed: {str(e)[:200]}")

    try:
        return extract_json(parse_with_claude(base64_data, mime_type, prompt))
    except ExtractionError as e:
        failures.append(str(e))
    except Exception as e:
        logger.warning("Claude vision failed: %s", e)
        failures.append(f"Claude failed: {str(e)[:200]}")

    logger.error("Extraction failed: %s", "; ".join(failures))
    raise ExtractionError("The AI was unable to parse the report. " + "; ".join(failures))


def extract_production_data(base64_data: str, mime_type: str) -> dict:
    return run_extraction(base64_data, mime_type, PRODUCTION_PROMPT)


def extract_rft_data(base64_data: str, mime_type: str) -> dict:
    return run_extraction(base64_data, mime_type, RFT_PROMPT)


def _unit_block(payload: dict, key: str) -> dict:
    block = payload.get(key) or {}
    if not isinstance(block, dict):
        raise ExtractionError(f"The AI returned the {key.capitalize()} figures in an unexpected format.")
    return block


def build_production_record(payload: dict, record_id: str = None, today: date = None) -> ProductionRecord:
    """Turn an extraction payload into a record; totalProduction is derived here."""
    if not isinstance(payload, dict):
        raise ExtractionError("The AI response was not a report object.")

    lantabur_block = _unit_block(payload, "lantabur")
    taqwa_block = _unit_block(payload, "taqwa")
    report_date = payload.get("date") or format_display_date((today or date.today()).isoformat())

    try:
        lantabur = IndustryData.model_validate({**lantabur_block, "name": "Lantabur"})
        taqwa = IndustryData.model_validate({**taqwa_block, "name": "Taqwa"})
        return ProductionRecord(
            id=record_id or new_id(),
            date=report_date,
            lantabur=lantabur,
            taqwa=taqwa,
            total_production=lantabur.total + taqwa.total,
            created_at=now_iso(),
        )
    except (ValidationError, TypeError) as e:
        logger.warning("Extracted production payload rejected: %s", e)
        raise ExtractionError("The AI returned production figures in an unexpected format.") from e


def build_rft_record(payload: dict, base: RFTReportRecord = None) -> RFTReportRecord:
    """Merge an extraction payload over a draft report.

    The draft keeps its id and creation time. When the payload has no shift
    summary, per-operator totals are derived from the entries and the record is
    marked as such.
    """
    if not isinstance(payload, dict):
        raise ExtractionError("The AI response was not a report object.")

    merged = base.to_wire() if base else {}
    merged.update({k: v for k, v in payload.items() if v is not None})
    merged["id"] = (base.id if base else None) or new_id()
    merged["createdAt"] = (base.created_at if base else None) or now_iso()
    if not merged.get("date"):
        merged["date"] = date.today().strftime("%d/%m/%Y")

    has_shift_summary = bool(payload.get("shiftPerformance")) and bool(payload.get("shiftCount"))
    merged["shiftSource"] = "extracted" if has_shift_summary else "derived"
    try:
        record = RFTReportRecord.model_validate(merged)
    except ValidationError as e:
        logger.warning("Extracted RFT payload rejected: %s", e)
        raise ExtractionError("The AI returned the RFT table in an unexpected format.") from e

    if not has_shift_summary:
        derived = derive_shift_totals(record.entries)
        record = record.model_copy(update={
            "shift_performance": ShiftTotals(**derived["shift_performance"]),
            "shift_count": ShiftTotals(**derived["shift_count"]),
        })
    return refresh_rft_percentages(record)
