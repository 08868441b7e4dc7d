"""
Terminal views of a finished interview: the scored analysis and the
question-by-question answers.
"""

import re

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mock_interview.orchestrator.schema import AnalysisResult, InterviewTranscript


NO_ANSWER = "No answer provided"

RECOMMENDATION_COLOURS = {"Hire": "green", "Consider": "yellow", "Reject": "red"}
DIFFICULTY_COLOURS = {"easy": "green", "medium": "yellow", "hard": "red"}


def humanize_key(key: str) -> str:
    """``problemSolving`` -> ``Problem Solving``"""
    return re.sub(r"(?<!^)([A-Z])", r" \1", key).strip().title()


def render_analysis(console: Console, analysis: AnalysisResult):
    """Score table, recommendation and every written section of the analysis"""
    colour = RECOMMENDATION_COLOURS[analysis.recommendation]

    table = Table(title="📊 Interview Analysis")
    table.add_column("Metric", style="cyan")
    table.add_column("Score", justify="right")
    table.add_row("Overall", f"{analysis.overall_score:.0f}/100")
    if analysis.technical_score is not None:
        table.add_row("Technical", f"{analysis.technical_score:.1f}/10")
    if analysis.communication_score is not None:
        table.add_row("Communication", f"{analysis.communication_score:.1f}/10")
    for dimension, score in analysis.score_breakdown.items():
        table.add_row(f"  {humanize_key(dimension)}", f"{score:.1f}/10")
    console.print(table)

    console.print(f"Recommendation: [bold {colour}]{analysis.recommendation}[/bold {colour}]")

    feedback = analysis.detailed_feedback
    if feedback.strengths:
        console.print("\n[bold green]Key Strengths[/bold green]")
        for item in feedback.strengths:
            console.print(f"  • {escape(item)}")
    if feedback.weaknesses:
        console.print("\n[bold yellow]Areas for Improvement[/bold yellow]")
        for item in feedback.weaknesses:
            console.print(f"  • {escape(item)}")

    sections = [
        ("Technical Assessment", feedback.technical_analysis, "blue"),
        ("Communication Skills", feedback.communication_analysis, "magenta"),
        ("Cultural Fit", feedback.cultural_fit, "bright_blue"),
    ]
    for title, text, border in sections:
        if text:
            console.print(Panel(escape(text), title=title, border_style=border))

    if feedback.specific_insights:
        console.print("\n[bold]Insights[/bold]")
        for item in feedback.specific_insights:
            console.print(f"  • {escape(item)}")

    if analysis.final_feedback:
        console.print(Panel(escape(analysis.final_feedback), title="Feedback", border_style="cyan"))
    if analysis.next_steps:
        console.print(Panel(escape(analysis.next_steps), title="Next Steps", border_style="white"))


def render_responses(console: Console, transcript: InterviewTranscript):
    """Every question of the session with the answer given to it"""
    info = transcript.candidate_info
    console.print(
        f"\n[bold]Interview Summary[/bold] · Position: {escape(info.position or '-')} · "
        f"Questions: {len(transcript.questions)}"
    )

    answers = {str(r.question_id): r.response for r in transcript.responses}
    for number, question in enumerate(transcript.questions, 1):
        difficulty = question.difficulty.value
        colour = DIFFICULTY_COLOURS.get(difficulty, "white")
        console.print(f"\n[cyan]Q{number}.[/cyan] [{colour}]({difficulty})[/{colour}] {escape(question.question)}")
        console.print(f"   {escape(answers.get(str(question.id), NO_ANSWER))}")


def render_settings(console: Console, summary: dict):
    """Active configuration, one row per setting"""
    table = Table(title="⚙️  Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for section, values in summary.items():
        for name, value in values.items():
            table.add_row(f"{section}.{name}", escape(str(value)))
    console.print(table)
