from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from reportlab.lib.units import mm

from ..config import get_settings
from ..types import (
    Document,
    DocumentMetadata,
    FieldGroup,
    FreeText,
    NotesGrid,
    Orientation,
    PageSize,
    utcnow,
)
from .measurement_table import ColumnDef, MeasurementTable


logger = logging.getLogger(__name__)

VERIFICATION_TITLE = 'BASE PIPE PERFORATION (FIRST PIECE) VERIFICATION FORM'
VERIFICATION_FORM_CODE = 'Form F6002 Rev:01'
EQUIPMENT_LETTERS = ('A', 'B', 'C', 'D', 'E', 'F', 'G', 'H', 'J', 'K')
PASS_FAIL = ('Pass', 'Fail')
REPORT_DATE_FORMAT = '%m/%d/%Y'


class BasePipeVerificationForm(BaseModel):
    job_no: str = ''
    drawing_no: str = ''
    equipment: dict[str, str] = Field(default_factory=dict)
    dimension_count: int = Field(default=5, ge=0)
    rows: int = Field(default=2, ge=1)
    # Cells keyed by column key, one mapping per table row
    length_rows: list[dict[str, str]] = Field(default_factory=list)
    countersunk_rows: list[dict[str, str]] = Field(default_factory=list)
    note_labels: list[str] = Field(default_factory=lambda: [f'D{n}' for n in range(1, 7)])
    notes: dict[str, str] = Field(default_factory=dict)
    inspector: str = ''
    generated_at: datetime = Field(default_factory=utcnow)


def length_verification_table(*, dimension_count: int = 5, rows: int = 1) -> MeasurementTable:
    table = MeasurementTable(
        [
            ColumnDef('perf_machine', 'Perforation Machine', width=25 * mm),
            ColumnDef('joint_no', 'Joint No.', width=18 * mm),
            ColumnDef('drill_bit', 'Drill Bit Size', width=20 * mm),
            ColumnDef('holes', 'No. of Holes/ring', width=20 * mm),
            ColumnDef('visual', 'Visual Inspection Perforation Pattern (Pass/Fail)', width=30 * mm, choices=PASS_FAIL),
            ColumnDef('inspected', 'Inspected By (Sign/date)', width=30 * mm),
        ],
        rows=rows,
        dimension_anchor='drill_bit',
    )
    for _ in range(dimension_count):
        table.add_dimension_pair()
    return table


def countersunk_table(*, rows: int = 1) -> MeasurementTable:
    def checked(key: str, label: str, width: float, *, highlighted: bool = False) -> list[ColumnDef]:
        return [
            ColumnDef(key, label, width=width * mm, highlighted=highlighted, choices=PASS_FAIL),
            ColumnDef(f'{key}_me', 'ME', width=10 * mm, highlighted=highlighted),
        ]

    def measured(key: str, label: str, width: float) -> list[ColumnDef]:
        return [ColumnDef(key, label, width=width * mm), ColumnDef(f'{key}_me', 'ME', width=10 * mm)]

    columns = [
        ColumnDef('perf_machine', 'Perf Machine', width=20 * mm),
        ColumnDef('joint_no', 'Joint No.', width=15 * mm),
        *checked('orientation', 'Orientation (Pass/Fail)', 20),
        *checked('countersunk', 'Countersunk (Pass/Fail)', 20),
        *checked('plug_gauge', '2M Plug Gauge (Pass/Fail)', 20, highlighted=True),
        *checked('surface', 'Surface Finish (Pass/Fail)', 20),
        *measured('angle', 'Angle', 15),
        *measured('diameter', 'Diameter', 15),
        ColumnDef('inspected', 'Inspected By (Sign/date)', width=25 * mm),
    ]
    return MeasurementTable(columns, rows=rows, row_height=12 * mm, header_height=24 * mm)


def _fill(table: MeasurementTable, data: list[dict[str, str]]) -> None:
    while table.row_count < len(data):
        table.add_row()
    keys = set(table.column_keys)
    for row, values in enumerate(data):
        for key, value in values.items():
            if key not in keys:
                raise ValueError(f'unknown column {key!r} in row {row}')
            table.set_cell(row, key, value)


def build_verification_document(form: BasePipeVerificationForm, *, margin: float | None = None) -> Document:
    length = length_verification_table(dimension_count=form.dimension_count, rows=form.rows)
    _fill(length, form.length_rows)
    countersunk = countersunk_table(rows=form.rows)
    _fill(countersunk, form.countersunk_rows)

    unknown = sorted(set(form.equipment) - set(EQUIPMENT_LETTERS))
    if unknown:
        raise ValueError(f'unknown measuring equipment slots: {unknown}')

    sections = [
        FieldGroup(
            title='1. PROJECT INFORMATION',
            columns=2,
            fields=[('Job No:', form.job_no), ('Drawing No:', form.drawing_no)],
        ),
        FieldGroup(
            title='2. MEASURING EQUIPMENT (ME)',
            columns=5,
            fields=[(f'{letter}):', form.equipment.get(letter, '')) for letter in EQUIPMENT_LETTERS],
        ),
        length.to_section(title='3. LENGTH VERIFICATION'),
        countersunk.to_section(title='4. COUNTERSUNK DIMENSION & OTHER CHECKS'),
        NotesGrid(
            title='5. NOTES',
            legend='D: Dimension',
            boxes_per_row=3,
            notes=[(f'{label}:', form.notes.get(label, '')) for label in form.note_labels],
            box_height=8 * mm,
        ),
    ]
    logger.debug(
        'Verification form %r: %d dimension pairs, %d rows',
        form.job_no or 'draft',
        form.dimension_count,
        length.row_count,
    )
    return Document(
        title=VERIFICATION_TITLE,
        page_size=PageSize.a4(Orientation.landscape),
        margin=get_settings().pdf_page_margin if margin is None else margin,
        sections=sections,
        metadata=DocumentMetadata(generated_by=form.inspector, generated_at=form.generated_at),
        form_code=VERIFICATION_FORM_CODE,
    )


def verification_file_name(form: BasePipeVerificationForm) -> str:
    return f'BasePipe_Verification_Form_{form.job_no or "Draft"}.pdf'


class ProductionStep(BaseModel):
    step_number: int
    step_name: str
    status: str = 'pending'
    completed_at: datetime | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class ManufacturingJob(BaseModel):
    job_number: str
    title: str = ''
    product_type: str = ''
    status: str = 'draft'
    started_at: datetime | None = None
    completed_at: datetime | None = None
    generated_by: str = ''


def _format_date(value: datetime | None) -> str:
    return value.strftime(REPORT_DATE_FORMAT) if value else ''


def _step_text(step: ProductionStep) -> str:
    lines = []
    if step.completed_at:
        lines.append(f'Completed: {_format_date(step.completed_at)}')
    for key, value in step.data.items():
        if value in (None, '', [], {}):
            continue
        lines.append(f'{key.replace("_", " ")}: {value}')
    return '\n'.join(lines)


def build_job_report_document(job: ManufacturingJob, steps: list[ProductionStep]) -> Document:
    fields = [
        ('Job Number:', job.job_number),
        ('Product Type:', job.product_type),
        ('Status:', job.status),
        ('Started:', _format_date(job.started_at)),
    ]
    if job.completed_at:
        fields.append(('Completed:', _format_date(job.completed_at)))

    sections: list = [FieldGroup(title=job.title or None, columns=2, fields=fields)]
    for step in sorted(steps, key=lambda s: s.step_number):
        sections.append(FreeText(title=f'{step.step_number}. {step.step_name}', text=_step_text(step)))

    return Document(
        title='Manufacturing Job Report',
        page_size=PageSize.a4(),
        margin=get_settings().pdf_page_margin,
        sections=sections,
        metadata=DocumentMetadata(generated_by=job.generated_by),
    )
