from audio_regions.services.editor_session import EditorSession
from audio_regions.services.region_serializer import dump_regions


class SaveRegions:
    """Use case for serializing the session's regions in chain order."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self) -> str:
        return dump_regions(self.session.params, self.session.store.spans())
