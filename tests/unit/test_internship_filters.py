"""Unit tests for internship search filters."""

from datetime import datetime, timedelta

import pytest

from placement_portal.models.internship import Internship
from placement_portal.schemas.search import SearchFilters
from placement_portal.utils.filters import InternshipFilter, duration_bucket

NOW = datetime(2026, 3, 2, 10, 0)


def make_internship(**overrides) -> Internship:
    fields = {
        "id": 1,
        "title": "Data Engineering Intern",
        "description": "Pipelines in Python and Spark",
        "company_name": "DataWorks",
        "required_skills": ["Python", "Spark", "SQL"],
        "eligible_departments": ["Computer Science"],
        "stipend_min": 15000,
        "stipend_max": 25000,
        "is_placement": False,
        "location": "Pune",
        "duration_weeks": 10,
        "posted_by": 1,
        "is_active": True,
        "created_at": NOW - timedelta(days=3),
    }
    fields.update(overrides)
    return Internship(**fields)


class TestDurationBucket:
    """Test duration classification."""

    @pytest.mark.parametrize(
        "weeks,expected",
        [(4, "short"), (8, "short"), (9, "medium"), (16, "medium"), (17, "long"), (None, None)],
    )
    def test_bucket_boundaries(self, weeks, expected):
        """Test that bucket edges are inclusive on the upper bound."""
        assert duration_bucket(weeks) == expected


class TestInternshipFilter:
    """Test internship filtering logic."""

    def test_no_filters_includes_everything(self):
        """Test that default filters pass any active posting."""
        include, reason = InternshipFilter(SearchFilters(), NOW).should_include(make_internship())
        assert include
        assert reason == "Passed all filters"

    def test_query_matches_skills_and_description(self):
        """Test that the query is matched case-insensitively across fields."""
        engine = InternshipFilter(SearchFilters(query="spark"), NOW)
        assert engine.should_include(make_internship())[0]

        engine = InternshipFilter(SearchFilters(query="kubernetes"), NOW)
        include, reason = engine.should_include(make_internship())
        assert not include
        assert "No match for query" in reason

    def test_skills_excluded_only_when_none_match(self):
        """Test that one overlapping skill is enough to keep a posting."""
        engine = InternshipFilter(SearchFilters(skills=["Go", "python"]), NOW)
        assert engine.should_include(make_internship())[0]

        engine = InternshipFilter(SearchFilters(skills=["Go", "Rust"]), NOW)
        include, reason = engine.should_include(make_internship())
        assert not include
        assert "None of the skills match" in reason

    def test_department_filter(self):
        """Test department eligibility; open postings match any department."""
        engine = InternshipFilter(SearchFilters(departments=["Mechanical"]), NOW)
        include, reason = engine.should_include(make_internship())
        assert not include
        assert reason == "Department not eligible"

        assert engine.should_include(make_internship(eligible_departments=[]))[0]

    def test_stipend_range(self):
        """Test stipend minimum and maximum."""
        too_high = InternshipFilter(SearchFilters(stipend_min=30000), NOW)
        assert too_high.should_include(make_internship())[1] == "Stipend below minimum"

        too_low = InternshipFilter(SearchFilters(stipend_max=10000), NOW)
        assert too_low.should_include(make_internship())[1] == "Stipend above maximum"

        fits = InternshipFilter(SearchFilters(stipend_min=20000, stipend_max=40000), NOW)
        assert fits.should_include(make_internship())[0]

    def test_type_filter(self):
        """Test internship versus placement selection."""
        placement = make_internship(is_placement=True)
        assert not InternshipFilter(SearchFilters(type="internship"), NOW).should_include(placement)[0]
        assert InternshipFilter(SearchFilters(type="placement"), NOW).should_include(placement)[0]
        assert not InternshipFilter(SearchFilters(type="placement"), NOW).should_include(
            make_internship()
        )[0]

    def test_location_and_company_substring(self):
        """Test that location and company filters match substrings."""
        engine = InternshipFilter(SearchFilters(locations=["pune"], companies=["data"]), NOW)
        assert engine.should_include(make_internship())[0]

        engine = InternshipFilter(SearchFilters(companies=["Acme"]), NOW)
        assert "Company not in" in engine.should_include(make_internship())[1]

    def test_duration_filter(self):
        """Test the duration bucket filter."""
        assert InternshipFilter(SearchFilters(duration="medium"), NOW).should_include(
            make_internship()
        )[0]
        assert not InternshipFilter(SearchFilters(duration="long"), NOW).should_include(
            make_internship()
        )[0]

    def test_date_posted_window(self):
        """Test that old postings are excluded by the posted window."""
        old = make_internship(created_at=NOW - timedelta(days=10))
        assert not InternshipFilter(SearchFilters(date_posted="week"), NOW).should_include(old)[0]
        assert InternshipFilter(SearchFilters(date_posted="month"), NOW).should_include(old)[0]
        assert InternshipFilter(SearchFilters(date_posted="all"), NOW).should_include(old)[0]
