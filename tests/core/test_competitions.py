# ABOUTME: Tests for the competition registry and link discovery on index and exam pages
# ABOUTME: Year ranges, problem number bounds and exam sub-page preference are exercised on small pages

import pytest
from conftest import WIKI, make_doc, wiki_page

from mathcomp_ingest.core.competitions import COMPETITIONS, get_competition

INDEX_URL = f"{WIKI}/AMC_8_Problems_and_Solutions"
EXAM_URL = f"{WIKI}/2023_AMC_8_Problems"

INDEX_BODY = """
<ul>
<li><a href="/wiki/index.php/2021_AMC_8">2021 AMC 8</a></li>
<li><a href="/wiki/index.php/2022_AMC_8_Problems">2022 AMC 8 Problems</a></li>
<li><a href="/wiki/index.php/2023_AMC_8_Problems">2023 AMC 8 Problems</a></li>
<li><a href="/wiki/index.php/2023_AMC_8_Answer_Key">2023 AMC 8</a></li>
<li><a href="/wiki/index.php/2023_AMC_10A_Problems">2023 AMC 10A Problems</a></li>
</ul>
"""

EXAM_BODY = """
<table class="wikitable"><tr>
<td><a href="/wiki/index.php/2023_AMC_8_Problems/Problem_2">Problem 2</a></td>
<td><a href="/wiki/index.php/2023_AMC_8_Problems/Problem_1#Solution">Problem 1</a></td>
<td><a href="/wiki/index.php/2023_AMC_8_Problems/Problem_26">Problem 26</a></td>
<td><a href="/wiki/index.php/2022_AMC_8_Problems/Problem_3">Previous exam</a></td>
</tr></table>
<p>See the <a href="/wiki/index.php/2023_AMC_8_Answer_Key">Answer Key</a>.</p>
"""


class TestRegistry:
    def test_known_competitions(self):
        assert set(COMPETITIONS) == {"amc8", "amc10a", "amc10b", "amc12a", "amc12b", "aime1", "aime2"}
        assert COMPETITIONS["aime1"].problem_count == 15
        assert COMPETITIONS["amc12b"].problem_count == 25

    def test_lookup_is_case_insensitive(self):
        assert get_competition("AMC8").id == "amc8"

    def test_unknown_competition(self):
        with pytest.raises(KeyError, match="Unknown competition 'usamo'"):
            get_competition("usamo")

    def test_index_url(self):
        assert get_competition("amc8").index_url("https://artofproblemsolving.com/") == INDEX_URL


class TestDiscoverYears:
    """Test year discovery on the competition index page."""

    def test_years_sorted_with_first_link_kept(self):
        years = get_competition("amc8").discover_years(make_doc(wiki_page(INDEX_BODY), INDEX_URL))

        assert years == {
            2021: f"{WIKI}/2021_AMC_8",
            2022: f"{WIKI}/2022_AMC_8_Problems",
            2023: f"{WIKI}/2023_AMC_8_Problems",
        }

    def test_inclusive_year_range(self):
        years = get_competition("amc8").discover_years(make_doc(wiki_page(INDEX_BODY), INDEX_URL), 2022, 2022)

        assert list(years) == [2022]

    def test_other_competition_links_ignored(self):
        years = get_competition("amc10a").discover_years(make_doc(wiki_page(INDEX_BODY), INDEX_URL))

        assert years == {2023: f"{WIKI}/2023_AMC_10A_Problems"}

    @pytest.mark.parametrize(
        "text,aime1,aime2",
        [
            ("2020 AIME I", 2020, None),
            ("2020 AIME II", None, 2020),
            ("1999 AIME", 1999, None),
        ],
    )
    def test_aime_variants(self, text, aime1, aime2):
        doc = make_doc(wiki_page(f'<a href="/wiki/index.php/x">{text}</a>'), f"{WIKI}/AIME_Problems_and_Solutions")

        assert list(get_competition("aime1").discover_years(doc)) == ([aime1] if aime1 else [])
        assert list(get_competition("aime2").discover_years(doc)) == ([aime2] if aime2 else [])


class TestDiscoverProblems:
    """Test problem link discovery on an exam page."""

    def test_problem_links_within_bounds(self):
        problems = get_competition("amc8").discover_problems(make_doc(wiki_page(EXAM_BODY), EXAM_URL), 2023)

        assert problems == {
            1: f"{EXAM_URL}/Problem_1",
            2: f"{EXAM_URL}/Problem_2",
        }

    def test_same_year_links_used_without_sub_pages(self):
        body = '<a href="/wiki/index.php/2023_AMC_8_Problems/Problem_4">4</a>'
        doc = make_doc(wiki_page(body), f"{WIKI}/2023_AMC_8")

        problems = get_competition("amc8").discover_problems(doc, 2023)

        assert problems == {4: f"{WIKI}/2023_AMC_8_Problems/Problem_4"}

    def test_answer_key_link(self):
        doc = make_doc(wiki_page(EXAM_BODY), EXAM_URL)

        assert get_competition("amc8").find_answer_key(doc) == f"{WIKI}/2023_AMC_8_Answer_Key"

    def test_no_answer_key_link(self):
        doc = make_doc(wiki_page("<p>Nothing here.</p>"), EXAM_URL)

        assert get_competition("amc8").find_answer_key(doc) is None
