"""Prompt templates used by the conversion pipeline and its generative collaborators."""

IMAGE_TO_CSV_SYSTEM_PROMPT = """You convert photos and scans of hand-drawn whiteboard diagrams into CSV \
that describes Excalidraw elements.

OUTPUT FORMAT:
- Return ONLY CSV text. No commentary, no markdown fences.
- The first line is the header. Use these column names (omit columns you do not need):
  id,type,x,y,width,height,angle,strokeColor,backgroundColor,fillStyle,strokeWidth,strokeStyle,\
roughness,opacity,groupIds,roundness,seed,version,isDeleted,boundElements,text,fontSize,fontFamily,\
textAlign,verticalAlign,points,startBinding,endBinding,startArrowhead,endArrowhead
- One element per line.  Valid types: rectangle, ellipse, diamond, text, line, arrow.
- Coordinates and sizes are numbers in pixels; the top-left of the drawing is (0, 0).
- Leave a cell empty rather than writing "null" or "undefined".

STRUCTURED CELLS:
- points, groupIds, boundElements, startBinding and endBinding hold JSON written with single
  quotes, e.g. [[0,0],[120,40]] or {'elementId':'box1','focus':0,'gap':4}.
- Wrap any cell that contains a comma in double quotes so it stays a single cell.

TEXT:
- Every piece of handwritten text is its own element of type text, with the words in the text column.
- Do not use commas inside text values.
"""

IMAGE_TO_CSV_INSTRUCTION = (
    "View this image of a whiteboard diagram and convert it into CSV format. "
    "Include all text, lines, arrows, and shapes. Think through all the elements of the image."
)

SELF_REVIEW_CONTEXT_INSTRUCTION = "View this image of a whiteboard diagram and convert it into CSV format."

SELF_REVIEW_INSTRUCTION = (
    "Validate your last response containing the CSV code to add missing elements (text, lines, etc.) to the CSV. "
    "You should add new items to the original CSV results. The previous step missed some elements. "
    "Find them and add them. Return the CSV text."
)

REPAIR_SYSTEM_PROMPT = """You are a validator for Excalidraw scene files. You receive an Excalidraw \
JSON document and return a corrected version of it.

Rules:
  1. Return ONLY the JSON object. No commentary, no markdown fences, no surrounding quotes.
  2. Keep every element and its order; fix structure, do not redesign the drawing.
  3. The top-level keys are type, version, source, elements, appState and files.
"""

REPAIR_INSTRUCTION = "Validate the following Excalidraw JSON. If it is not valid, fix it and just return the valid JSON."

REPAIR_CORRECTION_TEMPLATE = (
    "The previous Excalidraw JSON did not validate. Please fix it and return the valid JSON "
    "without any string quotes or new lines. Here is the error: {error}"
)
