from audio_regions.services.editor_session import EditorSession


class UndoEdit:
    """Use case for restoring the buffer saved before the last destructive edit."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self) -> bool:
        restored = self.session.undo.undo()
        if restored is None:
            return False
        # regions are not part of the snapshot
        self.session.replace_buffer(restored, 0.0)
        return True
