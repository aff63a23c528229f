# ABOUTME: Tests for assembling Problem records from problem pages
# ABOUTME: Covers statement, solutions, video links, choices, legacy fields and answer precedence

from conftest import CHOICES_LATEX, heading, make_doc, problem_page, wiki_page

from mathcomp_ingest.core.assembler import RecordAssembler, extract_choices, find_video_links
from mathcomp_ingest.extraction.base import DocumentHandle
from mathcomp_ingest.extraction.wiki.answers import AnswerSource
from mathcomp_ingest.extraction.wiki.segmenter import SectionKind, first_section, segment

STATEMENT = (
    '<p>What is <img class="latex" alt="$1+1$" src="//latex.artofproblemsolving.com/a/b.png">?</p>\n'
    f'<p><img class="latex" alt="{CHOICES_LATEX}" src="/images/choices.png"></p>'
)

VIDEO_BODY = (
    '<p><a href="https://youtu.be/abc123">https://youtu.be/abc123</a></p>'
    '<p><a href="https://www.youtube.com/watch?v=xyz">Another</a> '
    '<a href="https://youtu.be/abc123">again</a> <a href="https://example.com/notes">notes</a></p>'
)


def _full_page() -> str:
    return problem_page(
        statement=STATEMENT,
        solutions=[
            (
                "Solution 1",
                '<p>Adding gives 2, so the answer is <img class="latex" '
                r'alt="$\boxed{\textbf{(B)}\ 2}$" src="//latex.artofproblemsolving.com/c/d.png"></p>',
            ),
            ("Solution 2", "<p>Count on your fingers.</p>"),
            ("Video Solution", VIDEO_BODY),
        ],
    )


class TestRecordAssembler:
    """Test full record assembly from a problem page."""

    def test_assembles_complete_record(self):
        assembled = RecordAssembler().assemble(make_doc(_full_page()), 1)
        problem = assembled.problem

        assert problem.problem_number == 1
        assert problem.problem_text.startswith("What is $1+1$?")
        assert [s.title for s in problem.solutions] == ["Solution 1", "Solution 2"]
        assert problem.correct_answer == "B"
        assert assembled.resolution.source == AnswerSource.BOXED
        assert problem.source_url.endswith("/2023_AMC_8_Problems/Problem_1")

    def test_choices_from_latex_run(self):
        problem = RecordAssembler().assemble(make_doc(_full_page()), 1).problem

        assert problem.choices == {"A": "$1$", "B": "$2$", "C": "$3$", "D": "$4$", "E": "$5$"}
        assert problem.has_complete_choices

    def test_legacy_fields_mirror_first_solution(self):
        problem = RecordAssembler().assemble(make_doc(_full_page()), 1).problem

        assert problem.solution_text == problem.solutions[0].text
        assert problem.solution_html == problem.solutions[0].html
        assert "Adding gives 2" in problem.solution_text

    def test_markup_has_absolute_urls(self):
        problem = RecordAssembler().assemble(make_doc(_full_page()), 1).problem

        assert "https://latex.artofproblemsolving.com/a/b.png" in problem.problem_html
        assert "https://artofproblemsolving.com/images/choices.png" in problem.problem_html
        assert "https://latex.artofproblemsolving.com/c/d.png" in problem.solution_html

    def test_video_links_distinct_in_page_order(self):
        problem = RecordAssembler().assemble(make_doc(_full_page()), 1).problem

        assert [v.url for v in problem.video_solutions] == [
            "https://youtu.be/abc123",
            "https://www.youtube.com/watch?v=xyz",
        ]
        assert all(v.title == "Video Solution" for v in problem.video_solutions)

    def test_answer_key_takes_precedence(self):
        assembled = RecordAssembler().assemble(make_doc(_full_page()), 1, {1: "D"})

        assert assembled.problem.correct_answer == "D"
        assert assembled.resolution.conflicting
        assert assembled.resolution.heuristic_answer == "B"

    def test_page_without_solutions(self):
        assembled = RecordAssembler().assemble(make_doc(problem_page(solutions=[])), 7)
        problem = assembled.problem

        assert problem.solutions == []
        assert problem.solution_text == ""
        assert problem.correct_answer == ""
        assert not assembled.resolution.resolved

    def test_empty_solution_sections_skipped(self):
        page = problem_page(solutions=[("Solution", ""), ("Solution 2", "<p>Real work.</p>")])

        problem = RecordAssembler().assemble(make_doc(page), 2).problem

        assert [s.title for s in problem.solutions] == ["Solution 2"]
        assert problem.solution_text == "Real work."

    def test_image_only_solution_kept(self):
        page = problem_page(
            solutions=[
                ("Solution 1", r'<p><img class="latex" alt="$1+1=\boxed{\textbf{(B)}\ 2}$" src="/i/s1.png"></p>'),
                ("Solution 2", "<p>Thus the answer is (C).</p>"),
            ]
        )

        assembled = RecordAssembler().assemble(make_doc(page), 1)

        assert [s.title for s in assembled.problem.solutions] == ["Solution 1", "Solution 2"]
        assert assembled.problem.solution_text.startswith("$1+1=")
        assert assembled.problem.correct_answer == "B"
        assert assembled.resolution.source == AnswerSource.BOXED

    def test_page_without_problem_section(self):
        page = wiki_page("\n".join([heading("Solution"), "<p>The answer is (E).</p>"]))

        problem = RecordAssembler().assemble(make_doc(page), 4).problem

        assert problem.problem_text == ""
        assert problem.correct_answer == "E"
        assert problem.choices is None

    def test_final_url_recorded(self):
        doc = DocumentHandle(url="https://artofproblemsolving.com/wiki/index.php/Redirected", html=_full_page())

        problem = RecordAssembler().assemble(doc, 1).problem

        assert problem.source_url == "https://artofproblemsolving.com/wiki/index.php/Redirected"


class TestExtractChoices:
    """Test choice extraction from statements."""

    def test_ordered_list_choices(self):
        page = problem_page(
            statement="<p>Pick one.</p><ol><li>$10$</li><li>$20$</li><li>$30$</li><li>$40$</li><li>$50$</li></ol>"
        )
        sections = segment(make_doc(page))
        problem_section = first_section(sections, SectionKind.PROBLEM)

        choices = extract_choices(problem_section, "Pick one.")

        assert choices == {"A": "$10$", "B": "$20$", "C": "$30$", "D": "$40$", "E": "$50$"}

    def test_mathrm_labels(self):
        text = r"$\mathrm{(A)}\ 7 \qquad \mathrm{(B)}\ 8 \qquad \mathrm{(C)}\ 9$"

        assert extract_choices(None, text) == {"A": "$7$", "B": "$8$", "C": "$9$"}

    def test_no_choices(self):
        assert extract_choices(None, "Find the remainder when $N$ is divided by 1000.") is None


class TestFindVideoLinks:
    def test_embedded_player(self):
        page = problem_page(
            solutions=[("Video Solution", '<p><iframe src="//www.youtube.com/embed/q1w2e3"></iframe></p>')]
        )
        video = first_section(segment(make_doc(page)), SectionKind.VIDEO)

        assert find_video_links(video) == ["https://www.youtube.com/embed/q1w2e3"]
