# Offline KHQR window

import logging
import tkinter as tk
from tkinter import ttk, messagebox

from PIL import ImageTk

from offline_khqr import config
from offline_khqr.controller import FormController, READY
from offline_khqr.khqr import IndividualPayloadBuilder, describe_payload
from offline_khqr.render import QRCodeRenderer, preview_image
from offline_khqr.storage import JsonSettingsStore

log = logging.getLogger(__name__)


class OfflineKHQRGUI:
    def __init__(self, root, controller):
        root.title("Offline KHQR")
        self.root = root
        self.controller = controller

        self.frame = ttk.Frame(root, padding=15)
        self.frame.pack(expand=1, fill='both')

        ttk.Label(self.frame, text="Offline KHQR", font=("TkDefaultFont", 24, "bold")).pack(anchor=tk.W)

        self.error_label = ttk.Label(self.frame, text="", foreground="red")

        # Merchant info
        self.merchant_box = ttk.LabelFrame(self.frame, text="Merchant Info", padding=8)
        self.merchant_box.pack(fill='x', pady=5)
        self.store_name = tk.StringVar(value=controller.store_name)
        self.account_info = tk.StringVar(value=controller.account_info)
        ttk.Label(self.merchant_box, text="Store Name").pack(anchor=tk.W)
        ttk.Entry(self.merchant_box, textvariable=self.store_name).pack(fill='x')
        ttk.Label(self.merchant_box, text="Account Information").pack(anchor=tk.W)
        ttk.Entry(self.merchant_box, textvariable=self.account_info).pack(fill='x')

        # Amount
        amount_box = ttk.LabelFrame(self.frame, text="Amount (Offline Input)", padding=8)
        amount_box.pack(fill='x', pady=5)
        self.amount = tk.StringVar(value=controller.amount_text)
        ttk.Label(amount_box, text=f"Enter Amount ({controller.currency})").pack(anchor=tk.W)
        ttk.Entry(amount_box, textvariable=self.amount).pack(fill='x')

        ttk.Button(self.frame, text="Generate KHQR Offline", command=self.generate).pack(fill='x', pady=10)

        # QR preview
        self.canvas = tk.Canvas(self.frame, width=config.PREVIEW_SIZE, height=config.PREVIEW_SIZE,
                                highlightthickness=0)
        self.canvas.pack(pady=10)
        ttk.Label(self.frame, text="KHQR Payload:").pack(anchor=tk.W)
        self.payload_text = tk.Text(self.frame, height=5, width=60, wrap='char')
        self.payload_text.pack(fill='x')
        self.summary = ttk.Label(self.frame, text="")
        self.summary.pack(anchor=tk.W)

        self.save_button = ttk.Button(self.frame, text="Save QR Payload Locally", command=self.save)
        self.save_button.pack(fill='x', pady=10)
        self.status = ttk.Label(self.frame, text="")
        self.status.pack(anchor=tk.W)

        self.refresh()
        root.after_idle(self.restore)

    def _read_inputs(self):
        self.controller.store_name = self.store_name.get()
        self.controller.account_info = self.account_info.get()
        self.controller.amount_text = self.amount.get()

    def refresh(self):
        c = self.controller

        self.error_label.config(text=c.error_message)
        if c.error_message:
            self.error_label.pack(anchor=tk.W, pady=6, before=self.merchant_box)
        else:
            self.error_label.pack_forget()

        self.canvas.delete("all")
        self.tk_img = None
        if c.qr_image is not None:
            self.tk_img = ImageTk.PhotoImage(preview_image(c.qr_image, config.PREVIEW_SIZE))
            self.canvas.create_image(0, 0, anchor=tk.NW, image=self.tk_img)

        # Read-only but still selectable for copying
        self.payload_text.config(state='normal')
        self.payload_text.delete("1.0", tk.END)
        self.payload_text.insert(tk.END, c.khqr_string)
        self.payload_text.config(state='disabled')

        self.summary.config(text=describe_payload(c.khqr_string) if c.khqr_string else "")
        self.save_button.config(state='normal' if c.state == READY else 'disabled')
        self.status.config(text=c.status_message)

    def generate(self):
        try:
            self._read_inputs()
            self.controller.generate()
        except Exception as e:
            log.exception("Generate failed")
            messagebox.showerror("Generate Error", str(e))
        self.refresh()

    def save(self):
        try:
            self.controller.save()
        except Exception as e:
            log.exception("Save failed")
            messagebox.showerror("Save Error", str(e))
        self.refresh()

    def restore(self):
        try:
            self.controller.restore()
        except Exception as e:
            log.exception("Restore failed")
            messagebox.showerror("Restore Error", str(e))
        self.refresh()


def build_controller(settings_file=None):
    return FormController(
        builder=IndividualPayloadBuilder(),
        renderer=QRCodeRenderer(scale=config.QR_SCALE, border=config.QR_BORDER),
        store=JsonSettingsStore(settings_file or config.SETTINGS_FILE),
    )


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root = tk.Tk()
    OfflineKHQRGUI(root, build_controller())
    root.mainloop()


if __name__ == '__main__':
    main()
