from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from qcreport.config import get_settings
from qcreport.errors import ExportError, LayoutError
from qcreport.layout.assembler import DocumentAssembler
from qcreport.report.forms import (
    BasePipeVerificationForm,
    ManufacturingJob,
    ProductionStep,
    build_job_report_document,
    build_verification_document,
    verification_file_name,
)
from qcreport.report.pdf_export import export_pdf
from qcreport.report.pdf_inspect import count_pdf_pages, extract_page_texts
from qcreport.storage import read_json, resolve_output_path, write_bytes_atomic
from qcreport.types import Document


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _error(message: str, **extra: Any) -> int:
    _print_json({'status': 'error', 'message': message, **extra})
    return 2


def _load_input(path_arg: str) -> dict[str, Any] | None:
    path = Path(path_arg).expanduser().resolve()
    if not path.exists() or not path.is_file():
        return None
    return read_json(path)


def _write_document(document: Document, output: str) -> dict:
    pages = DocumentAssembler().render(document)
    data = export_pdf(pages, title=document.title, author=document.metadata.generated_by or None)
    path = resolve_output_path(output)
    write_bytes_atomic(path, data)
    return {
        'status': 'ok',
        'output_path': str(path),
        'page_count': len(pages),
        'bytes': len(data),
    }


def _run_guarded(action: Callable[[], dict]) -> int:
    try:
        payload = action()
    except ValidationError as exc:
        return _error('invalid input', errors=exc.errors(include_url=False, include_context=False))
    except (LayoutError, ExportError, ValueError) as exc:
        return _error(str(exc), error_type=type(exc).__name__)
    _print_json(payload)
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    payload = _load_input(args.input)
    if payload is None:
        return _error(f'Input not found: {args.input}')
    output = args.output or f'{Path(args.input).stem}.pdf'
    return _run_guarded(lambda: _write_document(Document.model_validate(payload), output))


def cmd_verification_form(args: argparse.Namespace) -> int:
    payload = _load_input(args.input)
    if payload is None:
        return _error(f'Input not found: {args.input}')

    def action() -> dict:
        form = BasePipeVerificationForm.model_validate(payload)
        return _write_document(build_verification_document(form), args.output or verification_file_name(form))

    return _run_guarded(action)


def cmd_job_report(args: argparse.Namespace) -> int:
    payload = _load_input(args.input)
    if payload is None:
        return _error(f'Input not found: {args.input}')

    def action() -> dict:
        job = ManufacturingJob.model_validate(payload.get('job') or {})
        steps = [ProductionStep.model_validate(item) for item in payload.get('steps') or []]
        output = args.output or f'Job_Report_{job.job_number}.pdf'
        return _write_document(build_job_report_document(job, steps), output)

    return _run_guarded(action)


def cmd_inspect(args: argparse.Namespace) -> int:
    pdf_path = Path(args.pdf).expanduser().resolve()
    if not pdf_path.exists() or not pdf_path.is_file():
        return _error(f'PDF not found: {pdf_path}')
    data = pdf_path.read_bytes()
    payload: dict = {'status': 'ok', 'path': str(pdf_path), 'page_count': count_pdf_pages(data)}
    if args.text:
        payload['pages'] = extract_page_texts(data)
    _print_json(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='qcreport paginated inspection form renderer')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render a Document JSON file to PDF')
    render.add_argument('--input', required=True, help='Path to Document JSON')
    render.add_argument('--output', required=False, help='Output PDF path (relative paths go to output_dir)')
    render.set_defaults(func=cmd_render)

    form = sub.add_parser('verification-form', help='Render a base pipe verification form')
    form.add_argument('--input', required=True, help='Path to form JSON')
    form.add_argument('--output', required=False)
    form.set_defaults(func=cmd_verification_form)

    job = sub.add_parser('job-report', help='Render a manufacturing job report')
    job.add_argument('--input', required=True, help='Path to JSON with "job" and "steps"')
    job.add_argument('--output', required=False)
    job.set_defaults(func=cmd_job_report)

    inspect = sub.add_parser('inspect', help='Report page count and text of a PDF')
    inspect.add_argument('--pdf', required=True, help='Path to PDF file')
    inspect.add_argument('--text', action='store_true', help='Include extracted page texts')
    inspect.set_defaults(func=cmd_inspect)

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
