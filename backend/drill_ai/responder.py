"""
Rule-based chat responder for Drill AI.

Answers chat messages by checking the lowercased message for keywords, in a
fixed order, and filling in Markdown templates. The data analysis reply is
built from simple aggregate statistics of the well's uploaded records.
There is no model behind this: the same message and data always give the
same reply.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from drill_ai.parser import Record


logger = logging.getLogger(__name__)

ASSISTANT_NAME = "Drill AI"

SPREADSHEET_EXTENSIONS = (".xlsx", ".xls", ".csv")

# Thresholds used to interpret the averages
DT_POROSITY_THRESHOLD = 60
GR_SHALE_THRESHOLD = 75


def welcome_message(well_name: str) -> str:
    return f"Hi, I'm {ASSISTANT_NAME}. Ask me anything about {well_name}!"


def _numeric_column(df: pd.DataFrame, columns: Sequence[str]) -> pd.Series:
    """
    Numeric values taken from the first listed column that has a non-zero
    number on each row.
    """
    result = pd.Series(np.nan, index=df.index, dtype="float64")
    for column in columns:
        if column not in df.columns:
            continue
        values = df[column]
        # bools are not measurements
        is_bool = values.map(lambda v: isinstance(v, bool)).astype(bool)
        values = values.where(~is_bool)
        values = pd.to_numeric(values, errors="coerce").replace(0, np.nan)
        result = result.combine_first(values)
    return result[np.isfinite(result)]


def summarize_records(records: Optional[List[Record]]) -> Dict[str, Any]:
    """
    Aggregate statistics reported by the data analysis reply.

    Returns:
        Dictionary with count, min_depth, max_depth (None when no depth is
        readable), avg_dt and avg_gr (0 when the column is missing), rounded
        to one decimal
    """
    if not records:
        return {"count": 0, "min_depth": None, "max_depth": None, "avg_dt": 0.0, "avg_gr": 0.0}

    df = pd.DataFrame(records)

    depths = _numeric_column(df, ["Depth", "depth", "DEPTH"])
    dt_values = _numeric_column(df, ["DT", "dt"])
    gr_values = _numeric_column(df, ["GR", "gr"])

    return {
        "count": len(df),
        "min_depth": float(depths.min()) if not depths.empty else None,
        "max_depth": float(depths.max()) if not depths.empty else None,
        "avg_dt": round(float(dt_values.mean()), 1) if not dt_values.empty else 0.0,
        "avg_gr": round(float(gr_values.mean()), 1) if not gr_values.empty else 0.0,
    }


def format_number(value: Optional[float]) -> str:
    """Render a number the way it reads in a sheet: 1267, 1274.4"""
    if value is None:
        return "unknown"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _attachment_reply(well_name: str, files: List[Dict[str, Any]]) -> str:
    file_list = "\n".join(
        f"- {f.get('name')} ({(f.get('size') or 0) / 1024:.1f}KB)" for f in files
    )

    data_analysis = ""
    content = files[0].get("content")
    if content:
        try:
            parsed = json.loads(content)
            if isinstance(parsed, list) and parsed and isinstance(parsed[0], dict):
                sample_row = parsed[0]
                data_analysis = f"""

### 📊 Data Analysis

I've parsed your spreadsheet and found:
- **Total rows**: {len(parsed)}
- **Columns**: {', '.join(sample_row.keys())}
- **Sample data**: {json.dumps(sample_row, indent=2)}

The data has been loaded into your drilling charts. Open the "Drilling Monitoring" tab to see it plotted."""
        except (TypeError, ValueError):
            data_analysis = (
                "\n\n### ⚠️ Data Parsing\n\n"
                "I received the file but could not read its rows. "
                "The charts may still have been updated from the upload."
            )

    return f"""## 📎 Spreadsheet Uploaded

I've received your file for {well_name}:

{file_list}{data_analysis}

### 🎯 What's Next?

- **View the data**: the "Drilling Monitoring" tab plots it by depth
- **Ask questions**: ask about any part of the drilling data
- **Get insights**: ask about rock composition, DT values or GR readings

### 💡 Example Questions

- "What's the average DT value in my data?"
- "Show me the rock composition analysis"
- "What are the depth ranges in this well?"
- "Analyze the GR trends"

What would you like to know about your drilling data?"""


def _formation_type(avg_dt: float, avg_gr: float) -> str:
    porous = avg_dt > DT_POROSITY_THRESHOLD
    shaly = avg_gr > GR_SHALE_THRESHOLD
    if porous and shaly:
        return "Mixed shale-sandstone with good porosity"
    if porous:
        return "High porosity sandstone formation"
    if shaly:
        return "Dense shale formation"
    return "Low porosity carbonate formation"


def _data_analysis_reply(well_name: str, records: Optional[List[Record]]) -> str:
    if not records:
        return (
            f"I'd be happy to help analyze your drilling data for {well_name}! "
            "However, I don't see any data uploaded yet. Please upload your drilling data "
            "file first, and then I can provide detailed analysis of the rock composition, "
            "DT values, and GR readings."
        )

    stats = summarize_records(records)
    avg_dt = stats["avg_dt"]
    avg_gr = stats["avg_gr"]

    dt_reading = (
        "Moderate to high porosity formations" if avg_dt > DT_POROSITY_THRESHOLD
        else "Dense, low porosity formations"
    )
    gr_reading = (
        "Shale-rich formations" if avg_gr > GR_SHALE_THRESHOLD
        else "Clean sandstone/limestone formations"
    )
    watch_for = (
        "shale swelling and borehole stability" if avg_gr > GR_SHALE_THRESHOLD
        else "formation changes and potential reservoir zones"
    )

    return f"""## 📊 Drilling Data Analysis for {well_name}

I can see you have **{stats['count']} data points** with depth ranging from **{format_number(stats['min_depth'])}** to **{format_number(stats['max_depth'])} feet**.

### 🔍 Key Insights

| Parameter | Value | Interpretation |
|-----------|-------|----------------|
| **Average DT** | {format_number(avg_dt)} | {dt_reading} |
| **Average GR** | {format_number(avg_gr)} | {gr_reading} |

### 📈 Charts

#### 🪨 Rock Composition
- **SH (Shale)**: clay-rich sedimentary rock
- **SS (Sandstone)**: quartz-rich sedimentary rock
- **LS (Limestone)**: calcium carbonate rock
- **DOL (Dolomite)**: magnesium carbonate rock
- **ANH (Anhydrite)**: calcium sulfate mineral
- **Coal**: organic sedimentary rock
- **Salt**: halite deposits

#### 📏 DT (Delta T)
- Acoustic travel time against depth
- Tracks porosity and rock density changes
- Higher values: more porous rock; lower values: denser rock

#### ☢️ GR (Gamma Ray)
- Natural radioactivity against depth
- Main curve for lithology identification
- High values: shale; low values: clean sandstone/limestone

### 💡 Recommendations

- **Formation Type**: {_formation_type(avg_dt, avg_gr)}
- **Drilling Considerations**: Monitor for {watch_for}

Would you like me to explain any specific aspect in more detail?"""


GREETING_REPLY = (
    "Hello! I'm {assistant}, your drilling data assistant for {well}. I can help you analyze "
    "drilling data, interpret rock compositions, and provide insights about your drilling operations."
)

THANKS_REPLY = (
    "You're welcome! I'm here to help with your drilling data analysis. Ask me anything about "
    "your drilling operations or data interpretation."
)

GOODBYE_REPLY = (
    "Goodbye! Come back anytime you need help with your drilling data. Have a great day!"
)

HELP_REPLY = """## 🤖 How I Can Help You

I'm {assistant}, an assistant for drilling data. Here's what I can do:

### 📊 Data Analysis
- Analyze drilling data from uploaded spreadsheets
- Interpret rock composition percentages
- Explain DT (Delta T) and GR (Gamma Ray) values
- Give drilling recommendations

### 🎯 Features
- **File Upload**: upload an XLSX or CSV file with drilling data
- **Charts**: uploaded data is plotted in the drilling charts
- **Instant Analysis**: summary statistics for the selected well

### 💡 Example Questions
- "What does this DT value mean?"
- "Analyze the rock composition in my data"
- "What are the drilling recommendations for this formation?"
- "Explain the GR trends in my well"

Upload a spreadsheet or ask me anything about drilling data!"""

ACKNOWLEDGE_REPLY = (
    "Great! I'm ready to help. Upload a spreadsheet with your drilling data or ask me about "
    "drilling operations, data analysis, or well interpretation."
)

AFFIRMATIVE_REPLY = "Perfect! What would you like to know about your drilling data or operations?"

NEGATIVE_REPLY = (
    "No problem! Let me know if you need help with drilling data analysis or have questions "
    "about your operations."
)

ROCK_REPLY = """## 🪨 Rock Composition Analysis

Rock composition shows the **percentage of each rock type** at each depth in the well.

### 📊 Common Rock Types

| Rock Type | Code | Description | Typical % |
|-----------|------|-------------|-----------|
| **Shale** | SH | Clay-rich sedimentary rock | 30-50% |
| **Sandstone** | SS | Quartz-rich sedimentary rock | 20-40% |
| **Limestone** | LS | Calcium carbonate rock | 10-30% |
| **Dolomite** | DOL | Magnesium carbonate rock | 5-15% |
| **Anhydrite** | ANH | Calcium sulfate mineral | 2-10% |
| **Coal** | Coal | Organic sedimentary rock | 0-5% |
| **Salt** | Salt | Halite mineral deposits | 0-3% |

### 🔍 Interpretation

- **SH + SS > 70%**: clastic sedimentary environment
- **LS + DOL > 30%**: carbonate platform environment
- **ANH present**: evaporite sequence
- **Coal present**: swamp/marsh environment
- **Salt present**: evaporite basin

### 💡 Drilling Implications

- **High SH%**: watch for borehole instability
- **High SS%**: good reservoir potential
- **High LS/DOL%**: candidate for acid stimulation
- **ANH present**: risk of salt creep
- **Coal present**: gas hazard"""

DT_REPLY = """## 📏 DT (Delta T) Analysis

**Delta T** is the **acoustic travel time** through the formation.

### 🔍 What DT Tells Us

| DT Range | Interpretation | Rock Type | Porosity |
|----------|----------------|-----------|----------|
| **< 50 μs/ft** | Very dense | Dense limestone, dolomite | < 5% |
| **50-60 μs/ft** | Dense | Shale, tight sandstone | 5-10% |
| **60-80 μs/ft** | Moderate porosity | Sandstone, limestone | 10-20% |
| **80-100 μs/ft** | Good porosity | Porous sandstone | 20-30% |
| **> 100 μs/ft** | High porosity | Highly porous sandstone | > 30% |

### 💡 Uses

- **Reservoir identification**: high DT marks candidate reservoir zones
- **Porosity estimation**: DT correlates with porosity
- **Lithology**: each rock type has a typical DT range
- **Fractures**: sudden DT increases can indicate fractures
- **Fluids**: gas zones read higher

### ⚠️ Notes

- Gas raises DT
- Overpressure lowers DT
- Higher temperature raises DT
- Heavy mud lowers DT"""

GR_REPLY = """## ☢️ GR (Gamma Ray) Analysis

**Gamma Ray** measures **natural radioactivity** and is the main lithology log.

### 🔍 What GR Tells Us

| GR Range | Interpretation | Rock Type | Source |
|----------|----------------|-----------|--------|
| **< 30 API** | Very low | Clean sandstone, limestone | Minimal |
| **30-60 API** | Low | Sandstone, limestone | Trace elements |
| **60-90 API** | Moderate | Shaly sandstone, marl | Clay minerals |
| **90-120 API** | High | Shale, claystone | Potassium, thorium |
| **> 120 API** | Very high | Organic-rich shale | Uranium, thorium |

### 📊 Lithology

- **Low GR (< 60 API)**: clean reservoir rock
- **High GR (> 90 API)**: shale, clay-rich rock
- **Variable GR**: mixed lithology, formation boundaries
- **Spiky GR**: fractured zones, washouts

### 💡 Uses

- Formation and well-to-well correlation
- Reservoir quality and shale volume
- Sequence stratigraphy

### ⚠️ Notes

- Organic content and uranium raise GR
- Washouts and heavy mud distort GR"""

RECOMMENDATION_REPLY = """## 💡 Drilling Recommendations

### 🎯 General Guidelines

| Parameter | Monitor For | Action |
|-----------|-------------|--------|
| **ROP Changes** | Formation changes, bit wear | Adjust drilling parameters |
| **DT Spikes** | Fractures, gas zones | Reduce mud weight, monitor gas |
| **GR Variations** | Lithology changes | Adjust drilling strategy |
| **Rock Composition** | Formation boundaries | Prepare for formation changes |

### ⚠️ Safety

- **High GR zones**: shale swelling
- **Low DT zones**: hard formations
- **Coal**: gas hazards
- **Salt**: salt creep

### 🔧 Optimization

- **High porosity zones**: lower mud weight to limit formation damage
- **Shale intervals**: inhibitive mud systems
- **Carbonates**: consider acid stimulation
- **Fractured zones**: watch for lost circulation

Would you like recommendations based on your actual data?"""

DEFAULT_REPLY = """I understand you're asking about "{message}". I'm {assistant}, your drilling data assistant for {well}.

I can help you with:
- 📊 Analyzing drilling data from spreadsheets
- 🪨 Interpreting rock compositions and formations
- 📏 Explaining DT and GR values
- 💡 Drilling recommendations
- 📈 Chart analysis

Upload a spreadsheet or ask me a question about drilling operations. What would you like to explore?"""


def generate_response(
    message: str,
    well_name: str,
    records: Optional[List[Record]] = None,
    attachments: Optional[List[Dict[str, Any]]] = None
) -> str:
    """
    Produce the canned reply for a chat message.

    Keyword rules are checked in order and the first match wins. Matching is on
    substrings of the lowercased message, so 'hi' also matches 'this'.

    Args:
        message: User's message text
        well_name: Well the conversation belongs to
        records: Canonical records of the well, if any
        attachments: Files attached to the message

    Returns:
        Markdown reply
    """
    text = (message or "").lower()

    if attachments:
        spreadsheets = [
            a for a in attachments
            if Path(a.get("name") or "").suffix.lower() in SPREADSHEET_EXTENSIONS
        ]
        if spreadsheets:
            return _attachment_reply(well_name, spreadsheets)

    if _contains_any(text, ("hello", "hi")):
        return GREETING_REPLY.format(assistant=ASSISTANT_NAME, well=well_name)

    if _contains_any(text, ("thanks", "thank you", "thx")):
        return THANKS_REPLY

    if _contains_any(text, ("bye", "goodbye", "see you")):
        return GOODBYE_REPLY

    if _contains_any(text, ("help", "what can you do")):
        return HELP_REPLY.format(assistant=ASSISTANT_NAME)

    if _contains_any(text, ("ok", "okay", "alright")):
        return ACKNOWLEDGE_REPLY

    if _contains_any(text, ("yes", "yeah", "yep")):
        return AFFIRMATIVE_REPLY

    if _contains_any(text, ("no", "nope")):
        return NEGATIVE_REPLY

    if _contains_any(text, ("chart", "data", "analysis", "saying")):
        return _data_analysis_reply(well_name, records)

    if _contains_any(text, ("rock", "composition")):
        return ROCK_REPLY

    if _contains_any(text, ("dt", "delta")):
        return DT_REPLY

    if _contains_any(text, ("gr", "gamma")):
        return GR_REPLY

    if _contains_any(text, ("recommendation", "advice")):
        return RECOMMENDATION_REPLY

    logger.debug("No keyword matched for message: %r", message)
    return DEFAULT_REPLY.format(message=message, assistant=ASSISTANT_NAME, well=well_name)
