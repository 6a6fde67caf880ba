"""
Streamlit app for the YIN guitar tuner.

Run with:  streamlit run app.py

Real-time mode: uses st.rerun() to create a continuous listen-detect-display
loop. Each cycle records one analysis frame, runs it through the tuner
session, displays the result, then reruns the script to capture the next frame.
"""

import logging
import time

import numpy as np
import sounddevice as sd
import streamlit as st

from yintuner.config import FRAME_SIZE, SAMPLE_RATE, TUNINGS
from yintuner.dataset import generate_harmonic_tone
from yintuner.session import TunerSession
from yintuner.tuning import get_tuning

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

st.set_page_config(page_title="YIN Tuner", layout="centered")
st.title("YIN Tuner")
st.caption("Guitar tuner built on the YIN pitch detector")

# --- Session state init ---
if "listening" not in st.session_state:
    st.session_state.listening = False
if "last_reading" not in st.session_state:
    st.session_state.last_reading = None

# --- Tuning and input selection ---
col_tuning, col_input = st.columns(2)
with col_tuning:
    tuning_name = st.selectbox("Tuning", list(TUNINGS.keys()))
with col_input:
    input_choice = st.selectbox("Input", ["Microphone", "Test tone"])

active_tuning = get_tuning(tuning_name)


@st.cache_resource
def load_session(name):
    return TunerSession(tuning=get_tuning(name))


# --- Show target frequencies ---
st.subheader(tuning_name)
cols = st.columns(len(active_tuning))
for i, target in enumerate(active_tuning):
    cols[i].metric(target.name, f"{target.frequency_hz:.0f} Hz")

test_freq = None
if input_choice == "Test tone":
    test_freq = st.slider("Test tone (Hz)", 70.0, 400.0, 110.0, step=0.5)

st.divider()


# --- Start / Stop toggle ---
def toggle_listening():
    st.session_state.listening = not st.session_state.listening
    if not st.session_state.listening:
        st.session_state.last_reading = None


if st.session_state.listening:
    st.button("Stop Listening", on_click=toggle_listening, type="primary")
else:
    st.button("Start Listening", on_click=toggle_listening, type="primary")

# --- Display results ---
result_container = st.empty()
reading = st.session_state.last_reading

if reading is not None:
    cents = reading.cents_deviation
    target = reading.nearest_target

    with result_container.container():
        col1, col2, col3, col4 = st.columns(4)
        col1.metric(f"Detected Note ({reading.note_frequency_hz:.2f} Hz)", reading.note_name)
        col2.metric("Frequency", f"{reading.frequency_hz:.2f} Hz")
        col3.metric("Target", f"{target.name} ({target.frequency_hz:.2f} Hz)")
        col4.metric("Cents Off", f"{cents:+.1f}")

        # Needle: -50..+50 cents mapped onto the bar, 50% = in tune
        st.progress(reading.needle_position)

        if reading.in_tune:
            st.success("In tune!")
        elif reading.direction == "sharp":
            st.warning(f"Sharp by {cents:.1f} cents -- tune down")
        else:
            st.warning(f"Flat by {abs(cents):.1f} cents -- tune up")
elif st.session_state.listening:
    result_container.info("Play one string at a time.")
else:
    result_container.info("Press Start Listening, allow the microphone, then play a string.")

# --- Continuous listening loop ---
if st.session_state.listening:
    session = load_session(tuning_name)

    if test_freq is not None:
        audio = generate_harmonic_tone(test_freq)
        # No capture to wait on, so pace the loop like a real frame would
        time.sleep(session.config.frame_duration)
    else:
        audio = sd.rec(
            FRAME_SIZE,
            samplerate=SAMPLE_RATE,
            channels=1,
            dtype="float32",
        )
        sd.wait()
        audio = audio.flatten()

    # Mic input can't be trusted to be finite, but a bad frame is just "no reading"
    if np.all(np.isfinite(audio)):
        st.session_state.last_reading = session.process_frame(audio, SAMPLE_RATE)
    else:
        logging.getLogger(__name__).warning("Dropped frame with non-finite samples")
        st.session_state.last_reading = None

    # Rerun to capture the next frame -- this creates the continuous loop
    st.rerun()
