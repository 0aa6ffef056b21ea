"""
Main NiceGUI application for the image survey editor.

Pages:
- /                      author dashboard: survey list with codes and submission counts
- /edit/{survey_id}      survey editor ('new' starts an empty survey)
- /join                  respondent code entry
- /survey/{identifier}   respondent view, by share code or survey id
- /results/{survey_id}   submissions table and export
"""

import io
import logging
import sys

from nicegui import ui

from dotenv import load_dotenv
load_dotenv()

from imagesurvey.codes import format_code_input, is_survey_code
from imagesurvey.config import get_settings
from imagesurvey.edit import EditController, EditOverlay, ElementRegistry, Tool
from imagesurvey.edit.actions import (
    AddAudioFile,
    AddPage,
    DeleteAudioFile,
    DeletePage,
    RenameAudioFile,
    SetRequired,
    SetTitle,
)
from imagesurvey.edit.handlers import MOUSE_EVENTS, setup_edit_handlers, parse_loaded_event
from imagesurvey.edit.hit_test import ELEMENT_OPTION, hit_test
from imagesurvey.edit.overlay import selection_svg
from imagesurvey.edit.coordinates import Rect, to_percent
from imagesurvey.errors import SurveyError
from imagesurvey.export import build_result_table, export_filename, write_csv, write_excel
from imagesurvey.models import ChoiceQuestion, QuestionType, Survey
from imagesurvey.responses import ResponseSession
from imagesurvey.storage import create_backend
from imagesurvey.survey_manager import SurveyManager

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

settings = get_settings()
survey_manager = SurveyManager(create_backend(settings), code_attempts=settings['code_attempts'])

TOOL_LABELS = [
    (Tool.SHORT_ANSWER, 'Short answer', 'short_text'),
    (Tool.SINGLE_CHOICE, 'Single choice', 'radio_button_checked'),
    (Tool.MULTIPLE_CHOICE, 'Multiple choice', 'check_box'),
    (Tool.AUDIO_BUTTON, 'Audio button', 'volume_up'),
    (Tool.MOVE, 'Move', 'open_with'),
    (Tool.DELETE, 'Delete', 'delete'),
]


def question_label(number: int, question) -> str:
    kind = question.type.value.replace('_', ' ').title()
    if isinstance(question, ChoiceQuestion):
        return f"Q{number}: {kind} ({len(question.options)} options)"
    return f"Q{number}: {kind}"


# --- Author dashboard ---

@ui.page('/')
def dashboard_page():
    ui.label('Image Surveys').classes('text-2xl font-bold')

    with ui.row().classes('gap-2'):
        ui.button('New survey', icon='add', on_click=lambda: ui.navigate.to('/edit/new')).props('color=primary')
        ui.button('Join as respondent', icon='login', on_click=lambda: ui.navigate.to('/join')).props('flat')

    @ui.refreshable
    def survey_list():
        surveys = survey_manager.list_surveys()
        if not surveys:
            ui.label('No surveys yet.').classes('text-gray-500')
            return
        for survey in surveys:
            with ui.card().classes('w-full max-w-3xl'):
                with ui.row().classes('w-full items-center justify-between'):
                    with ui.column().classes('gap-0'):
                        ui.label(survey.title or '(untitled)').classes('text-lg font-semibold')
                        ui.label(
                            f"Code {survey.code or '-'} · {len(survey.pages)} page(s) · "
                            f"{survey.submission_count} submission(s)"
                        ).classes('text-sm text-gray-500')
                    with ui.row().classes('gap-1'):
                        ui.button(icon='edit', on_click=lambda s=survey: ui.navigate.to(f'/edit/{s.id}')).props('flat dense').tooltip('Edit')
                        ui.button(icon='table_view', on_click=lambda s=survey: ui.navigate.to(f'/results/{s.id}')).props('flat dense').tooltip('Results')
                        ui.button(icon='delete', on_click=lambda s=survey: confirm_delete(s)).props('flat dense color=negative').tooltip('Delete')

    def confirm_delete(survey: Survey):
        with ui.dialog() as dialog, ui.card():
            ui.label(f'Delete "{survey.title}" and all its submissions?')
            with ui.row().classes('w-full justify-end gap-2'):
                ui.button('Cancel', on_click=dialog.close).props('flat')

                def do_delete():
                    survey_manager.delete(survey.id)
                    dialog.close()
                    ui.notify('Survey deleted', type='positive')
                    survey_list.refresh()

                ui.button('Delete', on_click=do_delete).props('color=negative')
        dialog.open()

    survey_list()


# --- Editor ---

@ui.page('/edit/{survey_id}')
def editor_page(survey_id: str):
    survey = Survey() if survey_id == 'new' else survey_manager.load(survey_id)
    if survey is None:
        ui.label('Survey not found.').classes('text-red-500')
        ui.button('Back', on_click=lambda: ui.navigate.to('/'))
        return

    registry = ElementRegistry(survey)
    controller = EditController(registry)
    overlay = EditOverlay(registry)
    state = {'mode': controller.state.mode}

    def refresh_ui():
        side_panel.refresh()
        canvas.refresh()

    handlers = setup_edit_handlers(state, controller, overlay, refresh_ui)

    def apply(command):
        try:
            result = controller.actions.apply(command)
        except SurveyError as e:
            ui.notify(str(e), type='negative')
            return None
        refresh_ui()
        return result

    def do_save():
        try:
            saved = survey_manager.save(registry.survey)
        except SurveyError as e:
            ui.notify(str(e), type='negative')
            return
        page_index = registry.current_page_index
        registry.load(saved)
        registry.select_page(page_index)
        ui.notify(f'Saved. Share code: {saved.code}', type='positive')
        if survey_id == 'new':
            ui.navigate.to(f'/edit/{saved.id}')
        else:
            refresh_ui()

    with ui.row().classes('w-full items-center gap-2'):
        ui.button(icon='arrow_back', on_click=lambda: ui.navigate.to('/')).props('flat dense')
        ui.input('Title', value=registry.survey.title,
                 on_change=lambda e: controller.actions.apply(SetTitle(e.value))).classes('w-96')
        ui.button('Save', icon='save', on_click=do_save).props('color=primary')

    with ui.row().classes('gap-1'):
        for tool, label, icon in TOOL_LABELS:
            ui.button(label, icon=icon, on_click=lambda t=tool: handlers['handle_tool'](t)).props('dense outline')
        ui.button('Finish question', icon='done', on_click=handlers['handle_finish_question']).props('dense flat')

    with ui.row().classes('w-full no-wrap gap-4'):
        @ui.refreshable
        def canvas():
            page = registry.current_page
            if page is None:
                ui.label('Add a page to start placing questions.').classes('text-gray-500')
                return
            image = ui.interactive_image(
                page.background_image,
                on_mouse=handlers['handle_mouse'],
                events=MOUSE_EVENTS,
                cross=False,
            ).classes('w-[800px]')
            image.on('loaded', handlers['handle_image_loaded'])
            overlay.attach(image)
            overlay.refresh()

        @ui.refreshable
        def side_panel():
            with ui.column().classes('w-80 gap-2'):
                ui.label('Pages').classes('font-semibold')
                for index, page in enumerate(registry.survey.pages):
                    with ui.row().classes('items-center gap-1'):
                        selected = index == registry.current_page_index
                        ui.button(f'Page {index + 1}', on_click=lambda i=index: handlers['handle_page'](i)) \
                            .props('dense ' + ('color=primary' if selected else 'outline'))
                        ui.button(icon='close', on_click=lambda i=index: apply(DeletePage(i))).props('flat dense')
                page_url = ui.input('Background image URL').classes('w-full')
                ui.button('Add page', on_click=lambda: page_url.value and apply(AddPage(page_url.value.strip()))).props('dense')

                ui.separator()
                ui.label('Questions').classes('font-semibold')
                number = 1
                for page_index, page in enumerate(registry.survey.pages):
                    for question in page.questions:
                        with ui.row().classes('items-center gap-1'):
                            ui.label(question_label(number, question)).classes('text-sm')
                            ui.checkbox('required', value=question.required,
                                        on_change=lambda e, q=question: apply(SetRequired(q.id, e.value))).props('dense')
                        number += 1

                ui.separator()
                ui.label('Audio files').classes('font-semibold')
                for audio_file in registry.survey.audio_files:
                    with ui.row().classes('items-center gap-1'):
                        ui.input(value=audio_file.name,
                                 on_change=lambda e, a=audio_file: controller.actions.apply(RenameAudioFile(a.id, e.value))).props('dense')
                        ui.button(icon='place', on_click=lambda a=audio_file: handlers['handle_audio_file'](a.id)).props('flat dense').tooltip('Place button')
                        ui.button(icon='delete', on_click=lambda a=audio_file: apply(DeleteAudioFile(a.id))).props('flat dense color=negative')
                audio_name = ui.input('Name').classes('w-full')
                audio_url = ui.input('Audio URL').classes('w-full')
                ui.button('Add audio file',
                          on_click=lambda: audio_url.value and apply(AddAudioFile(audio_name.value or audio_url.value, audio_url.value.strip())),
                          ).props('dense')

        canvas()
        side_panel()


# --- Respondent ---

@ui.page('/join')
def join_page():
    ui.label('Enter survey code').classes('text-2xl font-bold')
    code_input = ui.input('Code', placeholder='123-456').classes('w-48')

    def on_change(e):
        formatted = format_code_input(e.value or '')
        if formatted != e.value:
            code_input.value = formatted

    code_input.on_value_change(on_change)

    def do_join():
        code = code_input.value or ''
        if not is_survey_code(code):
            ui.notify('Codes look like 123-456', type='warning')
            return
        if survey_manager.load(code) is None:
            ui.notify('No survey with that code', type='negative')
            return
        ui.navigate.to(f'/survey/{code}')

    ui.button('Start', on_click=do_join).props('color=primary')


@ui.page('/survey/{identifier}')
def survey_page(identifier: str):
    survey = survey_manager.load(identifier)
    if survey is None:
        ui.label('Survey not found.').classes('text-red-500')
        return

    session = ResponseSession(survey)
    registry = ElementRegistry(survey)
    view = {'rect': Rect(0, 0, 0, 0)}

    ui.label(survey.title).classes('text-2xl font-bold')

    @ui.refreshable
    def page_view():
        page = session.current_page
        if page is None:
            ui.label('This survey has no pages.')
            return
        registry.select_page(session.page_index)
        overlay = EditOverlay(registry)

        def redraw():
            image.content = overlay.render(view['rect']) + selection_svg(page, view['rect'], session.is_selected)

        def on_loaded(e):
            size = parse_loaded_event(e)
            if size:
                view['rect'] = Rect(0, 0, *size)
                redraw()

        def on_click(e):
            point = to_percent((e.image_x, e.image_y), view['rect'])
            target = hit_test(page, point, include_audio=False)
            if target is not None and target.kind == ELEMENT_OPTION:
                session.choose(target.element_id, target.option_id)
                redraw()

        image = ui.interactive_image(page.background_image, on_mouse=on_click,
                                     events=['click'], cross=False).classes('w-[800px]')
        image.on('loaded', on_loaded)

        number = 1 + sum(len(p.questions) for p in survey.pages[:session.page_index])
        for question in page.questions:
            if question.type is QuestionType.SHORT_ANSWER:
                ui.input(f'Q{number}' + (' *' if question.required else ''),
                         value=session.answer(question.id) or '',
                         on_change=lambda e, q=question: session.set_text(q.id, e.value or '')).classes('w-96')
            number += 1

        for button, audio_file in registry.resolve_audio_buttons(page):
            ui.label(button.label or audio_file.name).classes('text-sm')
            ui.audio(audio_file.audio_url)

        with ui.row().classes('gap-2'):
            if not session.is_first_page:
                ui.button('Back', on_click=lambda: session.previous_page() and page_view.refresh())
            if not session.is_last_page:
                ui.button('Next', on_click=lambda: session.next_page() and page_view.refresh()).props('color=primary')
            else:
                ui.button('Submit', on_click=do_submit).props('color=positive')

    def do_submit():
        try:
            survey_manager.add_submission(session.build_submission())
        except SurveyError as e:
            ui.notify(str(e), type='negative')
            return
        ui.notify('Thank you! Your answers were submitted.', type='positive')
        ui.navigate.to('/join')

    page_view()


# --- Results ---

@ui.page('/results/{survey_id}')
def results_page(survey_id: str):
    survey = survey_manager.load(survey_id)
    if survey is None:
        ui.label('Survey not found.').classes('text-red-500')
        return

    submissions = survey_manager.submissions_for(survey.id)
    headers, rows = build_result_table(survey, submissions)

    with ui.row().classes('items-center gap-2'):
        ui.button(icon='arrow_back', on_click=lambda: ui.navigate.to('/')).props('flat dense')
        ui.label(f'{survey.title}: {len(submissions)} submission(s)').classes('text-2xl font-bold')

    columns = [{'name': str(i), 'label': h, 'field': str(i), 'align': 'left'} for i, h in enumerate(headers)]
    table_rows = [{str(i): value for i, value in enumerate(row)} for row in rows]
    ui.table(columns=columns, rows=table_rows).classes('w-full')

    def download_excel():
        buffer = io.BytesIO()
        write_excel(survey, submissions, buffer)
        ui.download(buffer.getvalue(), export_filename(survey.title))

    def download_csv():
        buffer = io.StringIO()
        write_csv(survey, submissions, buffer)
        ui.download(buffer.getvalue().encode('utf-8'), export_filename(survey.title, 'csv'))

    with ui.row().classes('gap-2'):
        ui.button('Export Excel', icon='download', on_click=download_excel).props('color=primary')
        ui.button('Export CSV', icon='download', on_click=download_csv).props('flat')


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Image Survey',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
