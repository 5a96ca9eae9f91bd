from __future__ import annotations

import pytest


@pytest.fixture
def dodge_row() -> dict[str, object]:
    return {
        "Project ID": "DGE-100",
        "Project Name": "  Oak St Tower ",
        "Project Description": "12-story mixed use",
        "Address": "1 Main St",
        "City": "Dublin",
        "State": "CA",
        "ZIP": 94568,
        "Project Value": "$5,250,000",
        "Project Type": "Commercial Office",
        "Status": "Under Construction",
        "Start Date": "03/15/2024",
        "End Date": "",
        "Owner": "City of Dublin",
        "Contractor": "Acme Builders",
        "Bid Date": "ignored",
    }
