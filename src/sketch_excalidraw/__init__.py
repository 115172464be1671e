"""Convert photos of hand-drawn whiteboard diagrams into Excalidraw scene files."""
