#!/usr/bin/env python3
"""
Streamlit app for the Sheet Reshaper
Upload an Excel file, pick a conversion and download the reshaped workbook
"""

import logging

import streamlit as st

from sheet_reshaper.config import ConversionOptions
from sheet_reshaper.core import convert_upload
from sheet_reshaper.exceptions import ConversionError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MODE_LABELS = {
    "월별": "monthly",
    "연도별": "yearly",
    "가격변환": "price",
}


def main():
    st.set_page_config(
        page_title="Sheet Reshaper",
        page_icon="📊",
        layout="wide"
    )

    st.title("📊 Sheet Reshaper")
    st.markdown("**Aggregate sales by year or month, or split pipe-joined price cells into rows**")

    with st.sidebar:
        st.header("ℹ️ Instructions")
        st.markdown("""
        1. Choose a conversion
        2. Upload your Excel file (only the first sheet is read)
        3. Click convert and download the result

        **월별 / 연도별:**
        - C: 모델 코드, D: 제품군, H: 금액, J: YYMMDD 일자 코드
        - One subtotal row per 제품군

        **가격변환:**
        - Requires 모델명, 물품대(변경후), 판매가(변경후) headers
        - Values separated by | are split into rows
        """)

    label = st.radio("Conversion", list(MODE_LABELS), horizontal=True)
    options = ConversionOptions(mode=MODE_LABELS[label])

    uploaded_file = st.file_uploader(
        "Choose your Excel file",
        type=['xlsx', 'xlsm'],
        help="Drag and drop or browse for the file to convert"
    )

    if uploaded_file is None:
        st.info("👆 Upload a file to start processing")
        return

    st.success(f"✅ File uploaded: {uploaded_file.name}")

    if st.button("🚀 Convert", type="primary", use_container_width=True):
        try:
            with st.spinner("Converting..."):
                result = convert_upload(uploaded_file, options)
        except ConversionError as e:
            logger.error(f"Conversion failed: {e}")
            st.error(f"❌ {e}")
            return

        st.success("🎉 변환 완료되었습니다. 다운로드 버튼을 클릭하세요!")
        st.dataframe(result.preview, use_container_width=True)

        st.download_button(
            label="📥 Download",
            data=result.content,
            file_name=result.filename,
            mime=result.mime_type,
            type="primary",
            use_container_width=True
        )


if __name__ == "__main__":
    main()
