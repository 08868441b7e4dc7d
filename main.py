"""
AI Mock Interview - Terminal Application

Runs one interview session from the terminal: the AI interviewer reads each
question aloud, the candidate records spoken answers, and the finished
interview is sent off for scoring.
"""

import asyncio
import sys
import argparse

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from pydantic import ValidationError
from loguru import logger

from config import config
from mock_interview.orchestrator import (
    ANALYSIS_KEY, RESULTS_KEY, AnalysisResult, CaptureManager, InterviewOrchestrator,
    InterviewResults, ResultCache, SessionReporter, SpeechChannel, TurnState
)
from mock_interview.clients import (
    ConsoleSpeechClient, QuestionBankClient, ResultsClient, ScoringClient, TranscriptionClient
)
from mock_interview.clients.pyttsx3_client import Pyttsx3Client
from mock_interview.devices import OpenCVCamera, PyAudioMicrophone, TerminalPreview
from mock_interview.utils.error_handlers import ResultsQueryError
from mock_interview.views import render_analysis, render_responses, render_settings

console = Console()


class InterviewApp:
    """Terminal front end for one interview session"""

    def __init__(self, args):
        self.console = console
        self.args = args
        self.cache = ResultCache(config.app.cache_dir)

        self.synthesizer = None
        self.microphone = None
        self.transcriber = None
        self.http_clients = []

    async def run(self):
        """Main application flow"""
        self._show_welcome()

        if self.args.show_analysis:
            self._show_cached_analysis()
            return

        email = self.args.email or await asyncio.to_thread(Prompt.ask, "Your email")
        if self.args.results:
            await self._show_prior_results(email)
            return

        orchestrator = None
        try:
            self._build_backends()
            if not self.args.skip_checks and not await self._check_system():
                return

            orchestrator = self._build_orchestrator(email)
            if not await self._setup(orchestrator):
                return

            await self._run_interview(orchestrator)
            self._show_outcome(orchestrator)

        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Interview cancelled by user.[/yellow]")
        except Exception as e:
            logger.exception("Unexpected error")
            self.console.print(f"[red]❌ Error: {str(e)}[/red]")
        finally:
            if orchestrator is not None:
                await orchestrator.close()
            await self._cleanup()
            logger.info("Application finished, all devices released.")

    # --- Wiring ---

    def _build_backends(self):
        if self.args.text_only or config.speech.tts_backend == "console":
            self.synthesizer = ConsoleSpeechClient(self.console)
        else:
            self.synthesizer = Pyttsx3Client()

        self.microphone = PyAudioMicrophone()

        if config.speech.transcription_backend == "whisper":
            # Model download and load only happen when this backend is selected
            from mock_interview.clients.whisper_turbo_client import WhisperTurboClient
            self.transcriber = WhisperTurboClient()
        else:
            self.transcriber = TranscriptionClient()
            self.http_clients.append(self.transcriber)

    def _build_orchestrator(self, email: str) -> InterviewOrchestrator:
        question_bank = QuestionBankClient()
        scoring = ScoringClient()
        self.http_clients.extend([question_bank, scoring])

        capture = CaptureManager(
            camera=OpenCVCamera(),
            microphone=self.microphone,
            display_sink=TerminalPreview(self.console),
        )
        reporter = SessionReporter(scoring, self.cache, analysis_ttl=config.app.analysis_ttl_seconds)

        return InterviewOrchestrator(
            email=email,
            job_id=self.args.job_id,
            question_bank=question_bank,
            capture=capture,
            speech=SpeechChannel(self.synthesizer),
            transcriber=self.transcriber,
            reporter=reporter,
        )

    async def _cleanup(self):
        if self.transcriber is not None:
            logger.info(f"Transcription statistics: {self.transcriber.get_statistics()}")
        for client in self.http_clients:
            await client.close()
        if self.transcriber is not None and self.transcriber not in self.http_clients:
            await self.transcriber.close()
        if self.synthesizer is not None:
            self.synthesizer.cleanup()
        if self.microphone is not None:
            self.microphone.cleanup()

    # --- Screens ---

    def _show_welcome(self):
        """Welcome banner"""
        panel = Panel(
            """🎙️  [bold cyan]AI Mock Interview[/bold cyan]

The AI interviewer reads each question aloud. Record your answer,
check the transcript, then submit it or record again.

[dim]Make sure your camera and microphone are connected.[/dim]""",
            title="Welcome",
            border_style="cyan"
        )
        self.console.print(panel)

    async def _check_system(self) -> bool:
        """Check speech output and audio input before the session"""
        self.console.print("\n[bold]🔍 System Checks[/bold]")
        render_settings(self.console, config.get_summary())

        all_ok = True

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console
        ) as progress:

            task = progress.add_task("[cyan]Checking speech output...", total=1)
            try:
                if await self.synthesizer.test_connection():
                    progress.update(task, completed=1, description=f"[green]✅ Speech ready ({self.synthesizer.backend})")
                else:
                    progress.update(task, completed=1, description="[red]❌ Speech engine not responding")
                    all_ok = False
            except Exception as e:
                progress.update(task, completed=1, description=f"[red]❌ Speech error: {str(e)}")
                all_ok = False

            task = progress.add_task("[cyan]Checking microphone...", total=1)
            if self.microphone.has_input_device():
                progress.update(task, completed=1, description="[green]✅ Microphone found")
            else:
                progress.update(task, completed=1, description="[red]❌ No input device found")
                all_ok = False

        if not all_ok:
            self.console.print("\n[red]Some systems are not ready. Please check:[/red]")
            self.console.print("1. Is a microphone connected and allowed for this terminal?")
            self.console.print("2. Is a speech engine installed? (or run with [cyan]--text-only[/cyan])")

        return all_ok

    async def _setup(self, orchestrator: InterviewOrchestrator) -> bool:
        """Load questions and open the camera, offering a manual retry"""
        with self.console.status("[cyan]Preparing your interview..."):
            ready = await orchestrator.setup()

        while not ready:
            self.console.print(Panel(orchestrator.session.error or "Setup failed", title="Setup error", border_style="red"))
            prompt = "Retry camera?" if orchestrator.session.questions else "Try loading the questions again?"
            if not await asyncio.to_thread(Confirm.ask, prompt, default=True):
                return False
            with self.console.status("[cyan]Retrying..."):
                ready = await orchestrator.setup()

        return True

    async def _run_interview(self, orchestrator: InterviewOrchestrator):
        """Question loop: record, review, submit or skip"""
        session = orchestrator.session
        info = session.candidate_info
        self.console.print(
            f"\n[bold]📋 {info.position or 'Interview'}[/bold] · "
            f"{len(session.questions)} questions"
            + (f" · {info.total_duration} min" if info.total_duration else "")
        )
        if not await asyncio.to_thread(Confirm.ask, "Start the interview?", default=True):
            return

        await orchestrator.start()
        self.console.print("\n[bold green]🎬 Interview started![/bold green]")

        while True:
            await orchestrator.wait_for_speech()
            state = orchestrator.state
            if state in (TurnState.FINISHING, TurnState.COMPLETED):
                break

            question = orchestrator.current_question
            number = session.current_question_index + 1

            if state == TurnState.AWAITING_RECORDING:
                self.console.print(Panel(
                    question.question,
                    title=f"Question {number}/{len(session.questions)}",
                    subtitle=f"{question.category} · {question.difficulty.value}",
                    border_style="blue"
                ))
                choice = await asyncio.to_thread(
                    Prompt.ask, "[r]ecord or [s]kip", choices=["r", "s"], default="r"
                )
                if choice == "r":
                    await self._record_answer(orchestrator)
                else:
                    await orchestrator.skip()

            elif state == TurnState.AWAITING_SUBMIT:
                self.console.print(Panel(
                    session.current_transcript or "[dim](nothing was heard)[/dim]",
                    title="Your answer",
                    border_style="green"
                ))
                choice = await asyncio.to_thread(
                    Prompt.ask, "[u]bmit, [r]e-record or [s]kip", choices=["u", "r", "s"], default="u"
                )
                if choice == "u":
                    if not await orchestrator.submit():
                        self.console.print(f"[yellow]{session.error}[/yellow]")
                elif choice == "r":
                    await self._record_answer(orchestrator)
                else:
                    await orchestrator.skip()

            else:
                logger.warning(f"Unexpected turn state in question loop: {state.value}")
                break

        with self.console.status("[cyan]Analyzing your responses..."):
            await orchestrator.wait_for_speech()

    async def _record_answer(self, orchestrator: InterviewOrchestrator):
        if not await orchestrator.start_recording():
            self.console.print(f"[red]❌ {orchestrator.session.error}[/red]")
            return

        self.console.print("[bold red]● Recording...[/bold red] [dim](press Enter to stop)[/dim]")
        await asyncio.to_thread(self.console.input, "")

        with self.console.status("[cyan]Transcribing..."):
            transcribed = await orchestrator.stop_recording()
        if not transcribed:
            self.console.print(f"[red]❌ {orchestrator.session.error}[/red]")

    def _show_outcome(self, orchestrator: InterviewOrchestrator):
        """Show what the session produced"""
        outcome = orchestrator.outcome
        if outcome is None:
            self.console.print("[yellow]The interview was not completed.[/yellow]")
            return

        self.console.print("\n[bold green]✅ Interview completed![/bold green]")
        if outcome.scored:
            render_analysis(self.console, outcome.analysis)
        else:
            self.console.print(
                f"[yellow]Scoring is unavailable right now. "
                f"{outcome.snapshot.total_responses} responses were recorded.[/yellow]"
            )
        render_responses(self.console, outcome.snapshot)
        if outcome.scored:
            self.console.print("[dim]Run with --show-analysis to view this analysis again once.[/dim]")

    def _show_cached_analysis(self):
        """One-time view of the last analysis, falling back to the recorded answers"""
        cached = self.cache.pop(ANALYSIS_KEY)
        if cached is not None:
            try:
                render_analysis(self.console, AnalysisResult.model_validate(cached))
                return
            except ValidationError as e:
                logger.warning(f"Cached analysis is malformed: {e.error_count()} errors")

        snapshot = self.cache.get(RESULTS_KEY)
        if snapshot is None:
            self.console.print("[yellow]No interview results found.[/yellow]")
            return

        results = InterviewResults.model_validate(snapshot)
        self.console.print(
            f"[bold]Interview of {results.completed_at}[/bold] · "
            f"{results.total_responses}/{results.total_questions} responses"
        )
        render_responses(self.console, results)

    async def _show_prior_results(self, email: str):
        """Dashboard: prior score summaries, newest first"""
        try:
            async with ResultsClient() as client:
                rows = await client.fetch_results(email)
        except ResultsQueryError as e:
            self.console.print(f"[red]❌ {e.user_message}[/red]")
            return

        if not rows:
            self.console.print("[yellow]No previous interviews found.[/yellow]")
            return

        table = Table(title=f"Interview history for {email}")
        table.add_column("Date", style="dim")
        table.add_column("Position", style="white")
        table.add_column("Overall", justify="right")
        table.add_column("Tech", justify="right")
        table.add_column("Comm", justify="right")
        table.add_column("Answered", justify="right")
        table.add_column("Recommendation")

        for row in rows:
            table.add_row(
                row.created_at.strftime("%Y-%m-%d %H:%M") if row.created_at else "-",
                row.position or "-",
                f"{row.overall_score:.0f}" if row.overall_score is not None else "-",
                f"{row.technical_score:.1f}" if row.technical_score is not None else "-",
                f"{row.communication_score:.1f}" if row.communication_score is not None else "-",
                f"{row.questions_answered or 0}/{row.total_questions or 0}",
                row.recommendation or "-",
            )
        self.console.print(table)


def main():
    """Program entry point"""
    parser = argparse.ArgumentParser(
        description="AI mock interview with spoken questions and recorded answers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --email jane@example.com               # Start an interview
  python main.py --email jane@example.com --job-id 42   # Interview for a specific job
  python main.py --email jane@example.com --results     # Show previous results
  python main.py --show-analysis                        # Show the last analysis once
        """
    )

    parser.add_argument('--email', type=str, help='Candidate email used to load the questions')
    parser.add_argument('--job-id', type=str, help='Job the interview is for')
    parser.add_argument('--results', action='store_true', help='Show previous interview results')
    parser.add_argument('--show-analysis', action='store_true', help='Show the cached analysis of the last interview')
    parser.add_argument('--text-only', action='store_true', help='Print the interviewer lines instead of speaking them')
    parser.add_argument('--skip-checks', action='store_true', help='Skip the startup system checks')

    args = parser.parse_args()

    app = InterviewApp(args)

    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Program closed.[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red]Critical error: {str(e)}[/red]")
        logger.exception("Critical error")
        sys.exit(1)


if __name__ == "__main__":
    main()
