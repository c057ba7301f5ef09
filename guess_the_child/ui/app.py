"""
Gradio UI for Guess The Child

Three views share one page: upload (build the roster), generating (caption
progress) and presenting (the reveal slideshow). Each browser session keeps
its own Session object in a gr.State.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

import gradio as gr

from ..core.pipeline import CaptionPipeline
from ..core.presenter import NO_DATA_MESSAGE, SlideView
from ..core.roster import Slot
from ..core.session import GeneratingView, PresentingView, Session, UploadView
from ..core.tokens import person_label

logger = logging.getLogger(__name__)


class GuessTheChildUI:
    """Main UI class for the Guess The Child application."""

    # Order of the components refreshed after every event
    VIEW_KEYS = (
        "upload_group",
        "error_box",
        "notice_box",
        "childhood_input",
        "current_input",
        "add_btn",
        "roster_header",
        "roster_gallery",
        "delete_btn",
        "generate_btn",
        "generating_group",
        "progress_box",
        "presenting_group",
        "counter_box",
        "heading_box",
        "then_image",
        "now_image",
        "caption_box",
        "hint_box",
        "reveal_btn",
        "prev_btn",
        "next_btn",
        "no_data_box",
    )

    def __init__(self, pipeline: CaptionPipeline):
        """Initialize UI.

        Args:
            pipeline: Caption pipeline shared by all sessions
        """
        self.pipeline = pipeline
        logger.info("Initialized Guess The Child UI")

    def new_session(self) -> Session:
        return Session(self.pipeline)

    def _ensure_session(self, session: Optional[Session]) -> Session:
        return session if session is not None else self.new_session()

    @staticmethod
    def generate_button_label(count: int) -> str:
        return f"Generate & Start ({count} Slide{'s' if count != 1 else ''})"

    def render(self, session: Session) -> Dict[str, Any]:
        """Compute component updates for the session's current view."""
        view = session.view
        entries = session.entries
        count = len(entries)
        pending = session.roster.pending

        updates: Dict[str, Any] = {
            # Upload view
            "upload_group": gr.update(visible=isinstance(view, UploadView)),
            "error_box": gr.update(
                value=f"**Oops!** {session.error}" if session.error else "",
                visible=bool(session.error)
            ),
            "notice_box": gr.update(value=session.notice or "", visible=bool(session.notice)),
            "childhood_input": gr.update(
                value=pending[Slot.CHILDHOOD].preview if pending[Slot.CHILDHOOD] else None
            ),
            "current_input": gr.update(
                value=pending[Slot.CURRENT].preview if pending[Slot.CURRENT] else None
            ),
            "add_btn": gr.update(interactive=session.roster.can_commit),
            "roster_header": gr.update(
                value=f"## Presentation Slides ({count})",
                visible=count > 0
            ),
            "roster_gallery": gr.update(
                value=[(entry.childhood.preview, person_label(i)) for i, entry in enumerate(entries)],
                visible=count > 0
            ),
            "delete_btn": gr.update(visible=count > 0),
            "generate_btn": gr.update(
                value=self.generate_button_label(count),
                interactive=count > 0
            ),
            # Generating view
            "generating_group": gr.update(visible=isinstance(view, GeneratingView)),
            "progress_box": gr.update(
                value=session.progress or "Crafting the perfect witty captions!"
            ),
            "presenting_group": gr.update(visible=isinstance(view, PresentingView)),
        }
        updates.update(self._render_slide(session))
        return updates

    def _render_slide(self, session: Session) -> Dict[str, Any]:
        slideshow = session.slideshow
        slide: Optional[SlideView] = slideshow.render() if slideshow is not None else None

        if slide is None:
            hidden = gr.update(visible=False)
            return {
                "counter_box": hidden,
                "heading_box": hidden,
                "then_image": gr.update(value=None, visible=False),
                "now_image": gr.update(value=None, visible=False),
                "caption_box": hidden,
                "hint_box": hidden,
                "reveal_btn": hidden,
                "prev_btn": hidden,
                "next_btn": hidden,
                "no_data_box": gr.update(value=NO_DATA_MESSAGE, visible=slideshow is not None),
            }

        return {
            "counter_box": gr.update(value=slide.counter, visible=True),
            "heading_box": gr.update(value=f"# {slide.heading}", visible=not slide.revealed),
            "then_image": gr.update(
                value=slide.childhood,
                label=SlideView.THEN_LABEL if slide.revealed else "Guess Who?",
                visible=True
            ),
            "now_image": gr.update(value=slide.current, label=SlideView.NOW_LABEL, visible=slide.revealed),
            "caption_box": gr.update(value=f"### *{slide.quoted_caption}*", visible=slide.revealed),
            "hint_box": gr.update(value=slide.hint, visible=not slide.revealed),
            "reveal_btn": gr.update(visible=not slide.revealed),
            "prev_btn": gr.update(visible=slide.has_prev),
            "next_btn": gr.update(visible=slide.has_next),
            "no_data_box": gr.update(visible=False),
        }

    def _outputs(self, session: Session) -> List[Any]:
        updates = self.render(session)
        return [session] + [updates[key] for key in self.VIEW_KEYS]

    # Event handlers

    def select_image(self, session: Optional[Session], file_path: Optional[str], slot: str) -> List[Any]:
        """Handle a photo upload into the childhood or current slot."""
        session = self._ensure_session(session)
        if file_path:
            session.select_image(file_path, slot)
        return self._outputs(session)

    def select_childhood(self, session: Optional[Session], file_path: Optional[str]) -> List[Any]:
        return self.select_image(session, file_path, Slot.CHILDHOOD.value)

    def select_current(self, session: Optional[Session], file_path: Optional[str]) -> List[Any]:
        return self.select_image(session, file_path, Slot.CURRENT.value)

    def clear_image(self, session: Optional[Session], slot: str) -> List[Any]:
        """Handle the user removing a photo from an upload slot."""
        session = self._ensure_session(session)
        session.clear_image(slot)
        return self._outputs(session)

    def clear_childhood(self, session: Optional[Session]) -> List[Any]:
        return self.clear_image(session, Slot.CHILDHOOD.value)

    def clear_current(self, session: Optional[Session]) -> List[Any]:
        return self.clear_image(session, Slot.CURRENT.value)

    def add_person(self, session: Optional[Session]) -> List[Any]:
        session = self._ensure_session(session)
        session.add_person()
        return self._outputs(session)

    def select_person(self, session: Optional[Session], evt: gr.SelectData) -> Optional[str]:
        """Remember which roster entry was clicked in the gallery."""
        session = self._ensure_session(session)
        index = evt.index if isinstance(evt.index, int) else None
        if index is None or not 0 <= index < len(session.entries):
            return None
        return session.entries[index].id

    def delete_person(self, session: Optional[Session], entry_id: Optional[str]) -> Tuple[Any, ...]:
        session = self._ensure_session(session)
        if entry_id:
            session.delete_person(entry_id)
        return tuple(self._outputs(session)) + (None,)

    def start_presentation(self, session: Optional[Session]) -> Iterator[List[Any]]:
        """Generate captions with streaming progress, then show the slideshow."""
        session = self._ensure_session(session)
        try:
            for _ in session.start_presentation():
                yield self._outputs(session)
        except Exception as e:
            logger.error(f"Presentation start failed: {e}")
            session.notice = f"Unexpected error: {e}"
            yield self._outputs(session)

    def reveal(self, session: Optional[Session]) -> List[Any]:
        session = self._ensure_session(session)
        session.reveal()
        return self._outputs(session)

    def next_slide(self, session: Optional[Session]) -> List[Any]:
        session = self._ensure_session(session)
        session.next_slide()
        return self._outputs(session)

    def prev_slide(self, session: Optional[Session]) -> List[Any]:
        session = self._ensure_session(session)
        session.prev_slide()
        return self._outputs(session)

    def reset(self, session: Optional[Session]) -> Tuple[Any, ...]:
        session = self._ensure_session(session)
        session.reset()
        return tuple(self._outputs(session)) + (None,)

    def build_interface(self) -> gr.Blocks:
        """Build the Gradio interface.

        Returns:
            Gradio Blocks interface
        """
        with gr.Blocks(
            title="Guess The Child",
            theme=gr.themes.Soft(),
            css="""
            .caption-box { text-align: center; }
            .counter-box { text-align: right; font-weight: bold; }
            """
        ) as interface:

            session_state = gr.State(None)
            selected_person = gr.State(None)

            # Upload view
            with gr.Column(visible=True) as upload_group:
                gr.Markdown("""
                # 👶 Guess The Child

                Create a fun AI-powered slideshow for your friends or colleagues!
                """)

                error_box = gr.Markdown("", visible=False)
                notice_box = gr.Markdown("", visible=False)

                gr.Markdown("## Add Person to Slideshow")
                with gr.Row():
                    childhood_input = gr.Image(
                        label="Childhood Photo: the adorable 'then' picture",
                        type="filepath",
                        sources=["upload"],
                        height=256
                    )
                    current_input = gr.Image(
                        label="Current Photo: the amazing 'now' picture",
                        type="filepath",
                        sources=["upload"],
                        height=256
                    )

                add_btn = gr.Button("Add Person", variant="secondary", interactive=False)

                roster_header = gr.Markdown("", visible=False)
                roster_gallery = gr.Gallery(
                    label="Click a person to select them",
                    columns=8,
                    height="auto",
                    allow_preview=False,
                    visible=False
                )
                delete_btn = gr.Button("🗑️ Remove Selected Person", size="sm", visible=False)

                generate_btn = gr.Button(
                    self.generate_button_label(0),
                    variant="primary",
                    size="lg",
                    interactive=False
                )

            # Generating view
            with gr.Column(visible=False) as generating_group:
                gr.Markdown("## Working our AI magic... ✨")
                progress_box = gr.Markdown("")

            # Presenting view
            with gr.Column(visible=False) as presenting_group:
                with gr.Row():
                    reset_btn = gr.Button("← Start Over", size="sm", scale=0)
                    counter_box = gr.Markdown("", elem_classes=["counter-box"])

                heading_box = gr.Markdown("")
                with gr.Row():
                    prev_btn = gr.Button("‹", size="sm", scale=0, visible=False)
                    then_image = gr.Image(label="Then", interactive=False, height=480)
                    now_image = gr.Image(label="Now", interactive=False, height=480, visible=False)
                    next_btn = gr.Button("›", size="sm", scale=0, visible=False)

                caption_box = gr.Markdown("", elem_classes=["caption-box"], visible=False)
                hint_box = gr.Markdown("")
                reveal_btn = gr.Button("Reveal", variant="primary")
                no_data_box = gr.Markdown(NO_DATA_MESSAGE, visible=False)

            components = {
                "upload_group": upload_group,
                "error_box": error_box,
                "notice_box": notice_box,
                "childhood_input": childhood_input,
                "current_input": current_input,
                "add_btn": add_btn,
                "roster_header": roster_header,
                "roster_gallery": roster_gallery,
                "delete_btn": delete_btn,
                "generate_btn": generate_btn,
                "generating_group": generating_group,
                "progress_box": progress_box,
                "presenting_group": presenting_group,
                "counter_box": counter_box,
                "heading_box": heading_box,
                "then_image": then_image,
                "now_image": now_image,
                "caption_box": caption_box,
                "hint_box": hint_box,
                "reveal_btn": reveal_btn,
                "prev_btn": prev_btn,
                "next_btn": next_btn,
                "no_data_box": no_data_box,
            }
            outputs = [session_state] + [components[key] for key in self.VIEW_KEYS]

            # Event Handlers

            # Photo uploads
            childhood_input.upload(
                fn=self.select_childhood,
                inputs=[session_state, childhood_input],
                outputs=outputs
            )
            current_input.upload(
                fn=self.select_current,
                inputs=[session_state, current_input],
                outputs=outputs
            )
            childhood_input.clear(fn=self.clear_childhood, inputs=[session_state], outputs=outputs)
            current_input.clear(fn=self.clear_current, inputs=[session_state], outputs=outputs)

            # Roster editing
            add_btn.click(fn=self.add_person, inputs=[session_state], outputs=outputs)
            roster_gallery.select(
                fn=self.select_person,
                inputs=[session_state],
                outputs=[selected_person]
            )
            delete_btn.click(
                fn=self.delete_person,
                inputs=[session_state, selected_person],
                outputs=outputs + [selected_person]
            )

            # Caption generation (streams progress)
            generate_btn.click(fn=self.start_presentation, inputs=[session_state], outputs=outputs)

            # Slideshow
            reveal_btn.click(fn=self.reveal, inputs=[session_state], outputs=outputs)
            then_image.select(fn=self.reveal, inputs=[session_state], outputs=outputs)
            next_btn.click(fn=self.next_slide, inputs=[session_state], outputs=outputs)
            prev_btn.click(fn=self.prev_slide, inputs=[session_state], outputs=outputs)
            reset_btn.click(
                fn=self.reset,
                inputs=[session_state],
                outputs=outputs + [selected_person]
            )

        return interface
