"""Inspection form and job report builders."""

from datetime import datetime, timezone

import pytest

from qcreport.report.forms import (
    BasePipeVerificationForm,
    ManufacturingJob,
    ProductionStep,
    build_job_report_document,
    build_verification_document,
    verification_file_name,
)
from qcreport.report.pdf_export import render_document_pdf
from qcreport.report.pdf_inspect import count_pdf_pages, extract_page_texts
from qcreport.types import Choice, FieldGroup, FreeText, NotesGrid, Table


@pytest.fixture
def form() -> BasePipeVerificationForm:
    return BasePipeVerificationForm(
        job_no='1818',
        drawing_no='DWG-204',
        equipment={'A': 'Caliper 0-150', 'K': 'Tape 5m'},
        length_rows=[{'perf_machine': 'PM-1', 'd1': '12.5', 'visual': 'Pass'}],
        countersunk_rows=[{}, {}, {'plug_gauge': 'Fail'}],
        notes={'D1': 'Hole pitch'},
        inspector='QA Lead',
    )


class TestVerificationForm:
    def test_layout(self, form):
        document = build_verification_document(form)
        width, height = document.page_size.dimensions()

        assert width > height
        assert document.form_code == 'Form F6002 Rev:01'
        kinds = [type(section) for section in document.sections]
        assert kinds == [FieldGroup, FieldGroup, Table, Table, NotesGrid]

    def test_length_table_columns(self, form):
        length = build_verification_document(form).sections[2]
        labels = [header.label for header in length.headers]

        assert labels[:2] == ['Perforation Machine', 'Joint No.']
        assert labels[2:12] == ['D1', 'ME', 'D2', 'ME', 'D3', 'ME', 'D4', 'ME', 'D5', 'ME']
        assert labels[12] == 'Drill Bit Size'
        assert length.rows[0][0] == 'PM-1'
        assert length.rows[0][2] == '12.5'
        assert length.rows[0][14] == Choice(selected='Pass')

    def test_countersunk_table(self, form):
        countersunk = build_verification_document(form).sections[3]
        labels = [header.label for header in countersunk.headers]

        assert len(countersunk.rows) == 3
        plug = labels.index('2M Plug Gauge (Pass/Fail)')
        assert countersunk.highlighted_columns == frozenset({plug, plug + 1})
        assert countersunk.rows[2][plug].display() == 'Fail'

    def test_equipment_and_notes(self, form):
        document = build_verification_document(form)
        equipment = document.sections[1]
        notes = document.sections[4]

        assert equipment.columns == 5
        assert equipment.fields[0] == ('A):', 'Caliper 0-150')
        assert equipment.fields[-1] == ('K):', 'Tape 5m')
        assert notes.legend == 'D: Dimension'
        assert notes.notes[0] == ('D1:', 'Hole pitch')
        assert len(notes.notes) == 6

    def test_renders_to_pdf(self, form):
        data = render_document_pdf(build_verification_document(form))
        pages = count_pdf_pages(data)
        texts = extract_page_texts(data)
        assert pages >= 1
        assert f'Page 1 of {pages}' in texts[0]
        assert 'BASE PIPE PERFORATION' in texts[0]

    def test_unknown_equipment_slot(self):
        with pytest.raises(ValueError):
            build_verification_document(BasePipeVerificationForm(equipment={'I': 'x'}))

    def test_unknown_row_column(self):
        with pytest.raises(ValueError):
            build_verification_document(BasePipeVerificationForm(length_rows=[{'nope': '1'}]))

    def test_dimension_count_controls_columns(self):
        document = build_verification_document(BasePipeVerificationForm(dimension_count=2))
        assert len(document.sections[2].headers) == 6 + 4

    def test_file_name(self, form):
        assert verification_file_name(form) == 'BasePipe_Verification_Form_1818.pdf'
        assert verification_file_name(BasePipeVerificationForm()) == 'BasePipe_Verification_Form_Draft.pdf'


class TestJobReport:
    def test_sections_follow_step_order(self):
        job = ManufacturingJob(
            job_number='JOB-7',
            title='Screen assembly',
            product_type='Base pipe',
            status='in_progress',
            started_at=datetime(2025, 7, 1, tzinfo=timezone.utc),
        )
        steps = [
            ProductionStep(step_number=2, step_name='Drilling', data={'drill_bit': '6mm', 'notes': ''}),
            ProductionStep(
                step_number=1,
                step_name='Cutting',
                completed_at=datetime(2025, 7, 2, tzinfo=timezone.utc),
                data={'heat_number': 'H1'},
            ),
        ]
        document = build_job_report_document(job, steps)

        header, first, second = document.sections
        assert isinstance(header, FieldGroup)
        assert ('Job Number:', 'JOB-7') in header.fields
        assert ('Started:', '07/01/2025') in header.fields
        assert isinstance(first, FreeText) and first.title == '1. Cutting'
        assert first.text.splitlines() == ['Completed: 07/02/2025', 'heat number: H1']
        assert second.text == 'drill bit: 6mm'

    def test_renders(self):
        job = ManufacturingJob(job_number='JOB-8')
        steps = [ProductionStep(step_number=n, step_name=f'Step {n}', data={'value': 'x' * 40}) for n in range(1, 30)]
        data = render_document_pdf(build_job_report_document(job, steps))
        assert count_pdf_pages(data) >= 1
