"""Unit tests for the rule-based chat responder."""

from __future__ import annotations

import json

import pytest

from drill_ai.responder import (
    DEFAULT_REPLY,
    format_number,
    generate_response,
    summarize_records,
    welcome_message,
)

RECORDS = [
    {"Depth": 100, "DT": 60, "GR": 50},
    {"Depth": 200, "DT": 70, "GR": 60},
    {"Depth": 300, "DT": 80, "GR": 70},
]


def test_welcome_message_names_the_well() -> None:
    assert welcome_message("Well B") == "Hi, I'm Drill AI. Ask me anything about Well B!"


def test_summarize_records() -> None:
    stats = summarize_records(RECORDS)

    assert stats == {"count": 3, "min_depth": 100.0, "max_depth": 300.0, "avg_dt": 70.0, "avg_gr": 60.0}


def test_summarize_records_skips_zero_and_text() -> None:
    records = [
        {"Depth": 0, "DT": 0},
        {"Depth": 150.5, "DT": 80},
        {"Depth": "n/a", "DT": True},
    ]

    stats = summarize_records(records)

    assert stats["count"] == 3
    assert stats["min_depth"] == 150.5
    assert stats["max_depth"] == 150.5
    assert stats["avg_dt"] == 80.0
    assert stats["avg_gr"] == 0.0


def test_summarize_records_without_data() -> None:
    assert summarize_records([]) == {
        "count": 0, "min_depth": None, "max_depth": None, "avg_dt": 0.0, "avg_gr": 0.0
    }


def test_format_number() -> None:
    assert format_number(1267.0) == "1267"
    assert format_number(1274.4) == "1274.4"
    assert format_number(None) == "unknown"


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Hello there", "I'm Drill AI, your drilling data assistant for Well A"),
        ("thanks a lot", "You're welcome!"),
        ("bye", "Goodbye!"),
        ("help", "How I Can Help You"),
        ("okay", "Great! I'm ready to help."),
        ("yes", "Perfect!"),
        ("nope", "No problem!"),
        ("Tell me about the rock composition", "Rock Composition Analysis"),
        ("delta t values", "DT (Delta T) Analysis"),
        ("Explain gamma readings", "GR (Gamma Ray) Analysis"),
        ("any advice?", "Drilling Recommendations"),
    ],
)
def test_keyword_rules(message, expected) -> None:
    assert expected in generate_response(message, "Well A")


def test_keywords_match_substrings() -> None:
    """'this' contains 'hi' and is answered with the greeting."""
    assert "Hello!" in generate_response("this", "Well A")


def test_unmatched_message_gets_default_reply() -> None:
    reply = generate_response("xyz", "Well C")

    assert reply == DEFAULT_REPLY.format(message="xyz", assistant="Drill AI", well="Well C")


def test_data_analysis_without_records() -> None:
    reply = generate_response("Summarize my data", "Well A", records=[])

    assert "I don't see any data uploaded yet" in reply


def test_data_analysis_reports_statistics() -> None:
    reply = generate_response("Summarize my data", "Well A", records=RECORDS)

    assert "## 📊 Drilling Data Analysis for Well A" in reply
    assert "**3 data points**" in reply
    assert "from **100** to **300 feet**" in reply
    assert "| **Average DT** | 70 | Moderate to high porosity formations |" in reply
    assert "| **Average GR** | 60 | Clean sandstone/limestone formations |" in reply
    assert "High porosity sandstone formation" in reply


def test_spreadsheet_attachment_takes_priority() -> None:
    attachments = [{
        "id": "1",
        "name": "sample-drilling-data.xlsx",
        "size": 2048,
        "content": json.dumps(RECORDS),
    }]

    reply = generate_response("hello", "Well A", attachments=attachments)

    assert reply.startswith("## 📎 Spreadsheet Uploaded")
    assert "- sample-drilling-data.xlsx (2.0KB)" in reply
    assert "**Total rows**: 3" in reply
    assert "**Columns**: Depth, DT, GR" in reply


def test_unreadable_attachment_content() -> None:
    attachments = [{"id": "1", "name": "log.csv", "size": 10, "content": "not json"}]

    reply = generate_response("", "Well A", attachments=attachments)

    assert "could not read its rows" in reply


def test_non_spreadsheet_attachment_is_ignored() -> None:
    attachments = [{"id": "1", "name": "photo.png", "size": 10}]

    reply = generate_response("okay", "Well A", attachments=attachments)

    assert "Great! I'm ready to help." in reply
