"""Logistics Assistant Agent - Sevkiyat verisi üzerinde sohbet asistanı.

- Soru kelimeleriyle ilgili sipariş kayıtlarını bulur (basit anahtar kelime eşleşmesi)
- Bulunan kayıtları bağlam olarak Nova modeline verir
- Lojistik belgelerinden (BL, fatura) alan çıkarır (görsel OCR)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from botocore.exceptions import ClientError

from src.agents.base_agent import BaseAgent
from src.config import ASSISTANT_MODEL_ID, REGION

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 4
MAX_FALLBACK_RECORDS = 5

FALLBACK_REPLY = "Üzgünüm, şu anda bir yanıt oluşturamadım."
ERROR_REPLY = "Yapay zeka servisine bağlanırken bir hata oluştu. Lütfen daha sonra tekrar deneyin."

SYSTEM_PROMPT = """Sen bir serbest bölge lojistik firmasının akıllı lojistik asistanısın.
Kullanıcıyla Türkçe konuş, doğal ve profesyonel yanıt ver.
Durumlar, tarihler, BL numaraları ve depolama faturalaması hakkındaki soruları
sadece sana verilen kayıtlara dayanarak yanıtla.
Yanıt verilerde yoksa bunu kibarca belirt.
Kullanıcı selam verirse kendini kısaca Lojistik Asistanı olarak tanıt."""

OCR_PROMPT = """Bu lojistik belge görüntüsünden aşağıdaki alanları JSON olarak çıkar:
- bl_number (konşimento / Bill of Lading numarası)
- invoice_number (fatura numarası)
- vces_code (varsa, yoksa null)

SADECE JSON döndür."""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LogisticsAssistantAgent(BaseAgent):
    """Sipariş kayıtları üzerinde soru yanıtlayan agent."""

    def __init__(self, region_name: str = REGION, **kwargs: Any):
        super().__init__(
            agent_name="LogisticsAssistantAgent",
            model_id=ASSISTANT_MODEL_ID,
            region_name=region_name,
            **kwargs,
        )

    # --- Bağlam bulma ---

    @staticmethod
    def extract_keywords(question: str) -> list[str]:
        return [w for w in question.lower().split() if len(w) >= MIN_KEYWORD_LENGTH]

    def retrieve_context(self, question: str, records: list[dict]) -> list[dict]:
        """Soru kelimelerinden birini içeren kayıtlar; eşleşme yoksa ilk 5 kayıt."""
        keywords = self.extract_keywords(question)
        relevant = []
        for record in records:
            text = json.dumps(record, ensure_ascii=False, default=str).lower()
            if any(k in text for k in keywords):
                relevant.append(record)
        return relevant or records[:MAX_FALLBACK_RECORDS]

    @staticmethod
    def build_prompt(question: str, context: list[dict]) -> str:
        return (
            "Sipariş ve stok bağlamı (veritabanından alınan kayıtlar):\n"
            f"{json.dumps(context, indent=2, ensure_ascii=False, default=str)}\n\n"
            f'Kullanıcının sorusu: "{question}"'
        )

    # --- Soru yanıtlama ---

    def answer(self, question: str, records: list[dict], history: Optional[list[dict]] = None) -> str:
        """Soruyu ilgili kayıtlarla birlikte modele sorar; hata durumunda özür mesajı."""
        context = self.retrieve_context(question, records)
        prompt = self.build_prompt(question, context)
        if history:
            turns = "\n".join(f"{h['role']}: {h['text']}" for h in history[-6:])
            prompt = f"Önceki konuşma:\n{turns}\n\n{prompt}"

        try:
            reply = self.invoke_model(prompt, max_tokens=1500, system=SYSTEM_PROMPT)
        except ClientError:
            return ERROR_REPLY

        logger.info("Asistan yanıtı üretildi (%d bağlam kaydı)", len(context))
        return reply or FALLBACK_REPLY

    # --- Belge OCR ---

    def extract_document_fields(self, image_bytes: bytes, image_format: str = "png") -> Optional[dict]:
        """Belge görüntüsünden BL, fatura ve VCES kodunu çıkarır; başarısızsa None."""
        try:
            reply = self.invoke_model(
                OCR_PROMPT, max_tokens=500, temperature=0.0, images=[(image_bytes, image_format)]
            )
        except ClientError:
            return None

        match = _JSON_OBJECT.search(reply or "")
        if not match:
            logger.warning("OCR yanıtında JSON bulunamadı")
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning("OCR JSON çözümleme hatası: %s", e)
            return None

        fields = {
            "bl_number": data.get("bl_number"),
            "invoice_number": data.get("invoice_number"),
            "vces_code": data.get("vces_code"),
        }
        self.log_decision(
            decision_type="document_extraction",
            input_data={"image_format": image_format, "size_bytes": len(image_bytes)},
            output_data=fields,
            reasoning="Belge görüntüsünden lojistik alanları çıkarıldı.",
        )
        return fields

    def process(self, question: str, records: list[dict]) -> str:
        return self.answer(question, records)
