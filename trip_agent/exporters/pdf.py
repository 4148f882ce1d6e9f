"""PDF rendering of an itinerary with reportlab."""
import io
import logging
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from trip_agent.models import Itinerary

logger = logging.getLogger("pdf-export")


def _styles():
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("TripTitle", parent=base["Title"], textColor=colors.HexColor("#2c3e50"), fontSize=28),
        "day": ParagraphStyle("TripDay", parent=base["Heading1"], textColor=colors.HexColor("#e67e22"), fontSize=22),
        "stop": ParagraphStyle("TripStop", parent=base["Heading3"], textColor=colors.HexColor("#2980b9"), fontSize=16),
        "detail": ParagraphStyle("TripDetail", parent=base["Normal"], textColor=colors.HexColor("#7f8c8d"), fontSize=12, leftIndent=12),
        "travel": ParagraphStyle("TripTravel", parent=base["Normal"], textColor=colors.HexColor("#27ae60"), fontSize=11, leftIndent=12),
    }


def render_itinerary_pdf(itinerary: Itinerary, city: Optional[str] = None) -> bytes:
    """Render one page per day and return the PDF document bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title="Travel Itinerary")
    styles = _styles()

    title = f"Travel Itinerary: {city}" if city else "Travel Itinerary"
    story = [Paragraph(escape(title), styles["title"]), Spacer(1, 24)]

    for index, day in enumerate(itinerary.days):
        if index > 0:
            story.append(PageBreak())
        story.append(Paragraph(f"Day {day.day}", styles["day"]))
        story.append(Spacer(1, 12))

        for block in day.blocks:
            name = escape(block.poi_name or block.poi_id)
            story.append(Paragraph(f"{escape(block.time_of_day)}: {name}", styles["stop"]))
            story.append(Paragraph(f"Duration: {block.duration_min} mins", styles["detail"]))
            if block.travel_time_min > 0:
                story.append(Paragraph(
                    f"Travel: {block.travel_time_min} mins ({block.travel_distance_km or 0} km)",
                    styles["travel"],
                ))
            story.append(Spacer(1, 12))

    doc.build(story)
    logger.info(f"Rendered PDF with {len(itinerary.days)} day(s)")
    return buffer.getvalue()
