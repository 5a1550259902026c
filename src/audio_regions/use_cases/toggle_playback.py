from audio_regions.services.editor_session import EditorSession


class TogglePlayback:
    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self) -> bool:
        if not self.session.has_audio():
            return False
        return self.session.transport.toggle_play()
