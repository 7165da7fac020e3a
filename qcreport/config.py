from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import StyleProfile


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True,
    )

    app_name: str = 'qcreport'

    output_dir: Path = Field(default=Path('./output'))
    log_level: str = Field(
        default='INFO',
        validation_alias=AliasChoices('QCREPORT_LOG_LEVEL', 'LOG_LEVEL'),
    )

    # Style profile
    pdf_font_name: str = Field(
        default='Helvetica',
        validation_alias=AliasChoices('QCREPORT_FONT_FAMILY', 'PDF_FONT_NAME'),
    )
    # Optional TTF registered under pdf_font_name before measuring
    pdf_font_path: Path | None = None
    pdf_base_font_size: float = 7.0
    pdf_header_fill_color: str = '#C8C8C8'
    pdf_highlight_fill_color: str = '#FFFF00'
    pdf_alternate_row_fill_color: str = '#F5F5F5'
    pdf_footer_text: str = Field(
        default='',
        validation_alias=AliasChoices('QCREPORT_FOOTER_TEXT', 'PDF_FOOTER_TEXT'),
    )

    # Document defaults
    pdf_page_margin: float = 28.35
    pdf_author: str = 'qcreport'

    # Legacy output keeps the linear truncation estimate.
    exact_truncation: bool = False

    def style_profile(self) -> StyleProfile:
        return StyleProfile(
            font_family=self.pdf_font_name,
            base_font_size=self.pdf_base_font_size,
            header_fill_color=self.pdf_header_fill_color,
            highlight_fill_color=self.pdf_highlight_fill_color,
            alternate_row_fill_color=self.pdf_alternate_row_fill_color,
            footer_text=self.pdf_footer_text,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
