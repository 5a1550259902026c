from audio_regions.services.editor_session import EditorSession
from audio_regions.services.region_serializer import parse_region_params, parse_regions


class LoadRegions:
    """Use case for replacing the session's regions from a region document."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self, text: str, loop: bool = False, region_index: int = 0, goto_region: bool = True) -> int:
        self.session.params = parse_region_params(text, self.session.params)
        spans = parse_regions(text)
        count = self.session.store.load(spans, loop=loop)

        if goto_region:
            ordered = self.session.store.ordered()
            start = ordered[region_index].start if -len(ordered) <= region_index < len(ordered) else 0.0
            self.session.transport.goto(start)
        return count
