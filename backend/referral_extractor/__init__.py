"""
OCR and structured field extraction for medical referral documents
"""
