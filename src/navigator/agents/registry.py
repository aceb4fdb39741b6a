"""
registry.py — Static catalog of the hospital agents.

Every ``AgentIdentity`` has exactly one ``AgentDefinition``. The table is
validated once when the registry is built and is read-only afterwards.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .base import AgentDefinition, AgentIdentity, Capability


class RegistryError(Exception):
    """The agent table is incomplete or inconsistent."""


class AgentRegistry:
    """Read-only lookup of agent definitions by identity or routing tool."""

    def __init__(self, definitions: Iterable[AgentDefinition]):
        table: dict[AgentIdentity, AgentDefinition] = {}
        for definition in definitions:
            if definition.identity in table:
                raise RegistryError(
                    f"Duplicate definition for {definition.identity.name}"
                )
            table[definition.identity] = definition

        missing = [identity.name for identity in AgentIdentity if identity not in table]
        if missing:
            raise RegistryError(f"Missing agent definitions: {', '.join(missing)}")

        if table[AgentIdentity.NAVIGATOR].tool_name is not None:
            raise RegistryError("The navigator cannot be a routing target")

        by_tool: dict[str, AgentIdentity] = {}
        for identity in AgentIdentity.specialists():
            tool_name = table[identity].tool_name
            if not tool_name:
                raise RegistryError(f"{identity.name} has no routing tool name")
            if tool_name in by_tool:
                raise RegistryError(
                    f"Routing tool {tool_name!r} maps to both "
                    f"{by_tool[tool_name].name} and {identity.name}"
                )
            by_tool[tool_name] = identity

        self._definitions: Mapping[AgentIdentity, AgentDefinition] = MappingProxyType(table)
        self._by_tool: Mapping[str, AgentIdentity] = MappingProxyType(by_tool)

    def lookup(self, identity: AgentIdentity) -> AgentDefinition:
        return self._definitions[identity]

    def all_definitions(self) -> tuple[AgentDefinition, ...]:
        """All definitions in enum order, navigator first."""
        return tuple(self._definitions[identity] for identity in AgentIdentity)

    def specialists(self) -> tuple[AgentDefinition, ...]:
        return tuple(self._definitions[identity] for identity in AgentIdentity.specialists())

    def specialist_for_tool(self, tool_name: str) -> AgentIdentity | None:
        return self._by_tool.get(tool_name)


# ---------------------------------------------------------------------------
# Persona prompts (verbatim behavioural contracts)
# ---------------------------------------------------------------------------

NAVIGATOR_INSTRUCTION = """
**NAMA AGEN UTAMA:** Penavigasi Pintar Rumah Sakit

**DESKRIPSI:** Agen AI komprehensif untuk sistem Rumah Sakit Pintar, mampu menavigasi informasi pasien, mengelola janji temu, mengambil rekam medis, dan menangani pertanyaan penagihan melalui sub-agen spesialis.

**INSTRUKSI/PERAN SISTEM (SYSTEM INSTRUCTION):**
Anda adalah Penavigasi Pintar Rumah Sakit yang ahli. Peran utama Anda adalah bertindak sebagai navigator pusat untuk semua pertanyaan terkait Rumah Sakit Pintar.

**ATURAN DELEGASI KRITIS:**
1.  Analisis dengan cermat permintaan pengguna untuk mengidentifikasi inti maksudnya (core intent).
2.  **Jangan mencoba menjawab permintaan pengguna secara langsung; selalu delegasikan ke sub-agen**.
3.  Pilih **satu sub-agen yang paling relevan** dari daftar di bawah.
4.  Teruskan seluruh konteks permintaan pengguna ke sub-agen yang dipilih.

**MAPPING DELEGASI (Pemetaan Tugas):**
*   Untuk pendaftaran, pembaruan detail, atau informasi umum pasien: Delegasikan ke **Patient_Information_Agent**.
*   Untuk penjadwalan, penjadwalan ulang, atau pembatalan janji temu: Delegasikan ke **Appointment_Scheduler**.
*   Untuk pengambilan rekam medis, hasil tes, atau riwayat kesehatan: Delegasikan ke **Medical_Records_Agent**.
*   Untuk pertanyaan penagihan, faktur, atau cakupan asuransi: Delegasikan ke **Billing_And_Insurance_Agent**.
"""

PATIENT_INFO_INSTRUCTION = """
**NAMA SUB-AGEN:** Patient_Information_Agent
**DESKRIPSI:** Mengelola pendaftaran, memperbarui detail, dan mengambil informasi umum pasien.
**INSTRUKSI:** Tangani permintaan pendaftaran, pembaruan detail, atau status pasien. **Gunakan Generate Document untuk membuat formulir** dan **Google Search** untuk mencari informasi eksternal.
"""

APPOINTMENT_INSTRUCTION = """
**NAMA SUB-AGEN:** Appointment_Scheduler
**DESKRIPSI:** Menjadwalkan, menjadwal ulang, dan membatalkan janji temu.
**INSTRUKSI:** Kelola semua tugas janji temu. **Gunakan Google Search** untuk menemukan ketersediaan dokter. Keluaran harus berupa status yang jelas dan dikonfirmasi (terjadwal, dijadwalkan ulang, atau dibatalkan).
"""

MEDICAL_RECORDS_INSTRUCTION = """
**NAMA SUB-AGEN:** Medical_Records_Agent
**DESKRIPSI:** Mengambil dan menyediakan akses ke rekam medis, hasil tes, dan riwayat kesehatan.
**INSTRUKSI:** Proses permintaan rekam medis. **Kerahasiaan harus dijaga setiap saat**. **Gunakan Generate Document** untuk menyediakan rekam dalam format terstruktur (pdf, docx, atau pptx).
"""

BILLING_INSTRUCTION = """
**NAMA SUB-AGEN:** Billing_And_Insurance_Agent
**DESKRIPSI:** Menangani pertanyaan tentang penagihan, cakupan asuransi, dan opsi pembayaran.
**INSTRUKSI:** Jelaskan faktur dan klarifikasi manfaat asuransi. **Gunakan Google Search untuk informasi umum kebijakan asuransi** dan **Generate Document** untuk membuat dokumen. Respons harus empatik dan mudah dipahami.
"""

WELCOME_TEXT = (
    "Halo! Saya Penavigasi Pintar Rumah Sakit. \n\n"
    "Saya dapat membantu menghubungkan Anda dengan layanan yang tepat, seperti:\n"
    "* Pendaftaran Pasien\n"
    "* Jadwal Dokter\n"
    "* Rekam Medis\n"
    "* Info Tagihan & Asuransi\n\n"
    "Silakan jelaskan kebutuhan Anda, dan saya akan menghubungkan Anda "
    "dengan agen spesialis kami."
)


DEFAULT_REGISTRY = AgentRegistry(
    [
        AgentDefinition(
            identity=AgentIdentity.NAVIGATOR,
            display_name="Penavigasi Pintar",
            role="Central Navigator",
            description="Menganalisis permintaan dan menghubungkan ke spesialis.",
            persona_prompt=NAVIGATOR_INSTRUCTION,
        ),
        AgentDefinition(
            identity=AgentIdentity.PATIENT_INFO,
            display_name="Info Pasien",
            role="Patient Information Agent",
            description="Mengelola pendaftaran, memperbarui detail, dan mengambil informasi umum pasien.",
            persona_prompt=PATIENT_INFO_INSTRUCTION,
            tool_name="Patient_Information_Agent",
            capabilities=frozenset({Capability.SEARCH, Capability.DOCUMENT_GENERATION}),
        ),
        AgentDefinition(
            identity=AgentIdentity.APPOINTMENT,
            display_name="Jadwal Temu",
            role="Appointment Scheduler",
            description="Menjadwalkan, menjadwal ulang, dan membatalkan janji temu.",
            persona_prompt=APPOINTMENT_INSTRUCTION,
            tool_name="Appointment_Scheduler",
            capabilities=frozenset({Capability.SEARCH}),
        ),
        AgentDefinition(
            identity=AgentIdentity.MEDICAL_RECORDS,
            display_name="Rekam Medis",
            role="Medical Records Agent",
            description="Mengambil dan menyediakan akses ke rekam medis, hasil tes, dan riwayat kesehatan.",
            persona_prompt=MEDICAL_RECORDS_INSTRUCTION,
            tool_name="Medical_Records_Agent",
            capabilities=frozenset({Capability.DOCUMENT_GENERATION}),
        ),
        AgentDefinition(
            identity=AgentIdentity.BILLING,
            display_name="Keuangan & Asuransi",
            role="Billing & Insurance Agent",
            description="Menangani pertanyaan tentang penagihan, cakupan asuransi, dan opsi pembayaran.",
            persona_prompt=BILLING_INSTRUCTION,
            tool_name="Billing_And_Insurance_Agent",
            capabilities=frozenset({Capability.SEARCH, Capability.DOCUMENT_GENERATION}),
        ),
    ]
)
