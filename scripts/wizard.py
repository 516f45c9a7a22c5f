"""Pledge wizard: the screens, dialogs and record behind a pledge certificate.

Screens run intro -> editor -> complete -> outro. On the editor screen the user
fills three dialogs (name, photo, signature). A dialog only writes into the
PledgeRecord when it is confirmed; until then its value is a draft (the typed
name, the live camera, the signature pad). Submitting composes the certificate
and moves to the complete screen; restart clears everything and goes back to
the campaign's reset screen.

A thin UI drives the wizard:

    wizard = PledgeWizard("arthritis", on_certificate=track)
    wizard.start()
    wizard.open_dialog("name"); wizard.set_name_draft("Jane Doe"); wizard.confirm_name()
    wizard.open_dialog("photo"); await wizard.start_camera(); wizard.capture_photo()
    wizard.open_dialog("signature", display_size=(500, 200))
    wizard.signature_pad.begin_stroke((10, 10)); ...; wizard.confirm_signature()
    await wizard.submit()
    filename, data = wizard.download()
"""

import dataclasses
import sys

from camera import CameraSession
from campaigns import load_campaign
from compose import compose_certificate
from errors import NotReadyError, PledgeError, TransitionError, ValidationError
from export import download_filename, write_certificate
from record import REQUIRED_FIELDS, PledgeRecord
from signature_pad import SignaturePad

SCREENS = ("intro", "editor", "complete", "outro")
DIALOGS = ("name", "photo", "signature")


class PledgeWizard:
    def __init__(self, campaign="arthritis", camera=None, on_certificate=None,
                 template=None, verbose=False):
        self.campaign = load_campaign(campaign)
        self.camera = camera if camera is not None else CameraSession(verbose=verbose)
        self.on_certificate = on_certificate
        self.template = template
        self.verbose = verbose

        self.record = PledgeRecord()
        self.screen = "intro"
        self.dialog = None
        self.name_draft = ""
        self.signature_pad = None
        self.composing = False
        self._generation = 0

    def _log(self, message):
        if self.verbose:
            print(f"[wizard] {message}", file=sys.stderr)

    def _require_screen(self, *screens):
        if self.screen not in screens:
            raise TransitionError(f"Not allowed on the '{self.screen}' screen")

    def _require_dialog(self, dialog):
        if self.dialog != dialog:
            raise TransitionError(f"The {dialog} dialog is not open")

    # -- screens ----------------------------------------------------------

    def start(self):
        self._require_screen("intro")
        self.screen = "editor"

    def finish(self):
        self._require_screen("complete")
        self.screen = "outro"

    def restart(self):
        """Drop everything the user entered and go back to the reset screen."""
        self.close_dialog()
        self.camera.close()
        self.record.clear()
        self._generation += 1
        self.composing = False
        self.screen = self.campaign.reset_screen
        self._log(f"restarted on '{self.screen}'")

    # -- dialogs ----------------------------------------------------------

    def dialog_at(self, point, display_size):
        """Which dialog a click on the editor template opens, if any."""
        display_w, display_h = display_size
        if display_w <= 0 or display_h <= 0:
            raise ValueError(f"Display size must be positive, got {display_w}x{display_h}")
        x = point[0] / display_w * 100
        y = point[1] / display_h * 100
        for dialog, box in self.campaign.hotspots.items():
            if box.x <= x <= box.x + box.width and box.y <= y <= box.y + box.height:
                return dialog
        return None

    def open_dialog(self, dialog, display_size=None):
        self._require_screen("editor")
        if dialog not in DIALOGS:
            raise ValueError(f"Unknown dialog: {dialog}")
        self.close_dialog()
        self.dialog = dialog
        if dialog == "name":
            self.name_draft = self.record.name
        elif dialog == "signature":
            width, height = self.campaign.signature_canvas
            self.signature_pad = SignaturePad(width, height, ink=self.campaign.ink_color,
                                              stroke_width=self.campaign.stroke_width)
            if display_size:
                self.signature_pad.mount(*display_size)
            else:
                self.signature_pad.mount()

    def close_dialog(self):
        """Dismiss the open dialog without committing its draft."""
        if self.dialog == "photo":
            self.camera.close()
        if self.signature_pad is not None:
            self.signature_pad.unmount()
            self.signature_pad = None
        self.name_draft = ""
        self.dialog = None

    # name

    def set_name_draft(self, text):
        self._require_dialog("name")
        self.name_draft = text

    def confirm_name(self):
        self._require_dialog("name")
        name = self.name_draft.strip()
        if not name:
            raise ValidationError(["name"])
        self.record.name = name
        self.close_dialog()

    # photo

    async def start_camera(self, facing=None):
        self._require_dialog("photo")
        return await self.camera.open(facing)

    async def switch_camera(self):
        self._require_dialog("photo")
        return await self.camera.switch_facing()

    def capture_photo(self):
        """Snapshot the camera into the record and close the photo dialog."""
        self._require_dialog("photo")
        photo = self.camera.snapshot()
        self.record.photo = photo
        self.close_dialog()
        return photo

    def clear_photo(self):
        self.record.photo = None

    # signature

    def confirm_signature(self):
        self._require_dialog("signature")
        signature = self.signature_pad.snapshot()
        if signature is None:
            raise ValidationError(["signature"])
        self.record.signature = signature
        self.close_dialog()

    # -- certificate ------------------------------------------------------

    def missing_fields(self):
        return self.record.missing_fields()

    async def submit(self, template=None):
        """Compose the certificate and move to the complete screen.

        Returns the CompositeResult, or None when the wizard was restarted
        while composing. A failure after a restart is dropped too.
        """
        self._require_screen("editor")
        if self.composing:
            raise TransitionError("A certificate is already being generated")
        missing = self.missing_fields()
        if missing:
            raise ValidationError(missing)
        self.close_dialog()

        generation = self._generation
        snapshot = dataclasses.replace(self.record)
        template = template if template is not None else self.template
        self.composing = True
        try:
            result = await compose_certificate(snapshot, self.campaign, template,
                                               verbose=self.verbose)
        except PledgeError as e:
            if generation != self._generation:
                self._log(f"restarted while composing, error dropped: {e}")
                return None
            raise
        finally:
            if generation == self._generation:
                self.composing = False

        if generation != self._generation:
            self._log("restarted while composing, result discarded")
            return None

        self.record.generated_certificate = result.data
        self.screen = "complete"
        if self.on_certificate is not None:
            self.on_certificate(dict(self.campaign.analytics_event))
        return result

    def progress(self):
        missing = self.missing_fields()
        done = len(REQUIRED_FIELDS) - len(missing)
        return {
            "screen": self.screen,
            "dialog": self.dialog,
            "steps_done": done,
            "steps_total": len(REQUIRED_FIELDS),
            "fraction": done / len(REQUIRED_FIELDS),
            "missing": missing,
            "certificate_ready": self.record.generated_certificate is not None,
        }

    def download(self):
        """Return (filename, jpeg bytes) for the generated certificate."""
        data = self.record.generated_certificate
        if data is None:
            raise NotReadyError("Certificate not ready yet. Please wait.")
        return download_filename(self.record.name, self.campaign), data

    def save(self, directory):
        if self.record.generated_certificate is None:
            raise NotReadyError("Certificate not ready yet. Please wait.")
        return write_certificate(self.record.generated_certificate, directory,
                                 self.record.name, self.campaign)
