"""
Streamlit Web App for the SM Markets Product Scraper
Run category scrapes and browse the resulting product files
"""

import glob
import json
import os
import subprocess
import sys
from datetime import datetime

import pandas as pd
import streamlit as st

from src.exporter import DataExporter

# Page configuration
st.set_page_config(
    page_title="SM Markets Scraper",
    page_icon="🛒",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        color: #0d47a1;
        font-weight: bold;
        text-align: center;
        padding: 1rem 0;
    }
    .success-message {
        padding: 1rem;
        background-color: #d4edda;
        border: 1px solid #c3e6cb;
        border-radius: 0.5rem;
        color: #155724;
    }
    .error-message {
        padding: 1rem;
        background-color: #f8d7da;
        border: 1px solid #f5c6cb;
        border-radius: 0.5rem;
        color: #721c24;
    }
</style>
""", unsafe_allow_html=True)


def get_result_files():
    """Get product JSON files in the working directory, newest first"""
    json_files = [
        f for f in glob.glob(os.path.join(os.getcwd(), "*.json"))
        if os.path.basename(f) != "package.json"
    ]
    json_files.sort(key=os.path.getmtime, reverse=True)
    return json_files[:10]


def load_products(file_path):
    """Load a product JSON document as (metadata, DataFrame)"""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        exporter = DataExporter()
        return data.get("metadata", {}), exporter.to_dataframe(data)
    except (OSError, ValueError, KeyError, AttributeError) as e:
        st.error(f"Error loading file: {e}")
        return None, None


def run_scraper(url, out, headful=False):
    """Run the scraper CLI as a subprocess"""
    cmd = [sys.executable, "main.py", "--url", url, "--out", out]
    if headful:
        cmd.append("--headful")

    try:
        return subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True
        )
    except OSError as e:
        st.error(f"Error starting scraper: {e}")
        return None


def display_metrics(metadata, df):
    """Display key metrics from the data"""
    if df is None or df.empty:
        return

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Total Products", len(df))

    with col2:
        st.metric("With Price", int(df["price"].notna().sum()))

    with col3:
        prices = pd.to_numeric(df["price"], errors="coerce")
        if prices.notna().any():
            st.metric("Avg Price", f"₱{prices.mean():.2f}")

    with col4:
        st.metric("Completed", "Yes" if metadata.get("completed") else "No")


def main():
    st.markdown('<div class="main-header">🛒 SM Markets Product Scraper</div>', unsafe_allow_html=True)
    st.markdown("### Scroll a category page and collect every product")

    # Sidebar
    st.sidebar.title("⚙️ Scraper Settings")
    url = st.sidebar.text_input("Category URL")
    out = st.sidebar.text_input("Output JSON", value="products.json")
    headful = st.sidebar.checkbox("Show browser window", value=False)

    st.sidebar.markdown("---")
    run_button = st.sidebar.button("🚀 Run Scraper", use_container_width=True, type="primary")

    tab1, tab2, tab3 = st.tabs(["📊 Run Scraper", "📁 View Results", "📈 Analysis"])

    # Tab 1: Run Scraper
    with tab1:
        if run_button and not url:
            st.warning("Enter a category URL first.")
        elif run_button:
            st.markdown('<div class="success-message">✅ Scraper started! Please wait...</div>', unsafe_allow_html=True)
            status_text = st.empty()

            process = run_scraper(url, out, headful)

            if process:
                output_lines = []

                for line in process.stdout:
                    output_lines.append(line.rstrip())
                    if "Found" in line or "Saved" in line:
                        status_text.text(f"🔄 {line.strip()}")

                process.wait()

                if process.returncode == 0:
                    st.markdown('<div class="success-message">🎉 Scraping completed successfully!</div>', unsafe_allow_html=True)
                    with st.expander("View Detailed Log"):
                        st.code("\n".join(output_lines))
                else:
                    st.markdown('<div class="error-message">❌ Scraping encountered errors. Check the log below.</div>', unsafe_allow_html=True)
                    with st.expander("View Error Log", expanded=True):
                        st.code("\n".join(output_lines))
        else:
            st.info("👈 Enter a category URL in the sidebar and click 'Run Scraper' to start")
            st.write(f"**Output file:** {out}")
            st.write("Interrupted runs resume from the output file and only append new products.")

    # Tab 2: View Results
    with tab2:
        st.markdown("### 📁 Scraped Product Files")

        result_files = get_result_files()

        if not result_files:
            st.warning("No results found. Run the scraper first to generate data.")
        else:
            file_names = [os.path.basename(f) for f in result_files]
            selected_file = st.selectbox("Select a file to view", file_names)

            if selected_file:
                metadata, df = load_products(os.path.join(os.getcwd(), selected_file))

                if df is not None and not df.empty:
                    display_metrics(metadata, df)
                    st.caption(f"Source: {metadata.get('sourceUrl', '')}")

                    st.markdown("---")

                    search = st.text_input("Filter by name")
                    if search:
                        df = df[df["name"].str.contains(search, case=False, na=False)]

                    st.dataframe(df, use_container_width=True, height=400)

                    csv = df.to_csv(index=False).encode("utf-8")
                    st.download_button(
                        label="📥 Download CSV",
                        data=csv,
                        file_name=selected_file.rsplit(".", 1)[0] + ".csv",
                        mime="text/csv",
                        use_container_width=True
                    )
                else:
                    st.warning("This file holds no products.")

    # Tab 3: Analysis
    with tab3:
        st.markdown("### 📈 Price Analysis")

        result_files = get_result_files()

        if not result_files:
            st.warning("No data available for analysis. Run the scraper first.")
        else:
            metadata, df = load_products(result_files[0])

            if df is not None and not df.empty:
                st.write(f"Analyzing: {os.path.basename(result_files[0])}")
                df["price"] = pd.to_numeric(df["price"], errors="coerce")
                priced = df.dropna(subset=["price"])

                if not priced.empty:
                    st.markdown("#### Price Statistics by Unit of Measure")
                    uom_stats = priced.groupby("uom")["price"].agg([
                        ("Count", "count"),
                        ("Min Price", "min"),
                        ("Max Price", "max"),
                        ("Avg Price", "mean"),
                        ("Median Price", "median")
                    ]).round(2)
                    st.dataframe(uom_stats, use_container_width=True)

                    st.markdown("#### Top 10 Cheapest Products")
                    st.dataframe(
                        priced.nsmallest(10, "price")[["name", "uom", "priceText", "weightedPriceText"]],
                        use_container_width=True
                    )

                unpriced = df[df["price"].isna()]
                if not unpriced.empty:
                    st.markdown(f"#### Products without a parseable price ({len(unpriced)})")
                    st.dataframe(unpriced[["name", "url", "priceText"]], use_container_width=True)

    # Footer
    st.markdown("---")
    st.markdown("""
    <div style='text-align: center; color: #666;'>
        <p>SM Markets Product Scraper v1.0 | Last updated: {}</p>
        <p>Powered by Playwright & Streamlit</p>
    </div>
    """.format(datetime.now().strftime("%Y-%m-%d %H:%M:%S")), unsafe_allow_html=True)


if __name__ == "__main__":
    main()
